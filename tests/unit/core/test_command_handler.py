import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from marsmcp.core.command_handler import MISSING_KEY_MESSAGE, CommandHandler, mask_secret, parse_params
from marsmcp.domain.interfaces.user_interface import UserInterface
from marsmcp.infrastructure.mars.config import MarsConfig


@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)


@pytest.fixture
def handler_for(mars_config, mock_ui, make_client):
    """Builds a CommandHandler whose clients talk to a MockTransport handler."""
    def build(http_handler, config: MarsConfig = None) -> CommandHandler:
        return CommandHandler(
            config=config or mars_config,
            ui=mock_ui,
            client_factory=lambda cfg: make_client(http_handler, config=cfg),
        )
    return build


def test_parse_params_repeated_keys():
    assert parse_params(["q=commodity=Corn", "tags=a", "tags=b", "tags=c"]) == {
        "q": "commodity=Corn",
        "tags": ["a", "b", "c"],
    }
    assert parse_params(None) == {}
    assert parse_params(["empty="]) == {"empty": ""}


@pytest.mark.parametrize("bad", ["novalue", "=value"])
def test_parse_params_rejects_malformed(bad):
    with pytest.raises(ValueError, match="expected key=value"):
        parse_params([bad])


def test_mask_secret():
    assert mask_secret(None) is None
    assert mask_secret("short") == "****"
    assert mask_secret("abcdefghijkl") == "****ijkl"


async def test_handle_get_success(handler_for, mock_ui):
    handler = handler_for(lambda request: httpx.Response(200, json=[{"office_name": "Dodge City"}]))
    exit_code = await handler.handle_get("/offices", {})
    assert exit_code == 0
    mock_ui.display_json.assert_called_once_with([{"office_name": "Dodge City"}])
    mock_ui.display_error.assert_not_called()


async def test_handle_get_upstream_error(handler_for, mock_ui):
    handler = handler_for(lambda request: httpx.Response(404, json={"message": "not found"}))
    exit_code = await handler.handle_get("/reports/999", {})
    assert exit_code == 1
    mock_ui.display_error.assert_called_once_with("not_found: MARS request failed (HTTP 404)")
    mock_ui.display_json.assert_called_once_with({"message": "not found"}, title="Upstream details")


async def test_handle_get_without_api_key(handler_for, mock_ui):
    calls = []
    handler = handler_for(lambda request: calls.append(request), config=MarsConfig(base_url="https://example.com/"))
    exit_code = await handler.handle_get("/reports", {})
    assert exit_code == 1
    assert calls == []
    mock_ui.display_error.assert_called_once_with(MISSING_KEY_MESSAGE)


def test_handle_tools(handler_for, mock_ui):
    handler = handler_for(lambda request: httpx.Response(200))
    assert handler.handle_tools() == 0
    title, columns, rows = mock_ui.display_table.call_args.args
    assert columns == ["Tool", "Description"]
    assert [row[0] for row in rows][:2] == ["mars_get", "mars_health"]


def test_handle_config_masks_key(mock_ui):
    config = MarsConfig(base_url="https://example.com/", api_key="supersecretkey")
    handler = CommandHandler(config=config, ui=mock_ui)
    assert handler.handle_config() == 0
    _, values = mock_ui.display_mapping.call_args.args
    assert values["api_key"] == "****tkey"
    assert values["base_url"] == "https://example.com/"
    assert "supersecretkey" not in str(values)


def test_handle_serve(handler_for, mocker):
    create_server = mocker.patch("marsmcp.core.command_handler.create_server")
    run_server = mocker.patch("marsmcp.core.command_handler.run_server")
    handler = handler_for(lambda request: httpx.Response(200))

    assert handler.handle_serve("http", "0.0.0.0", 8080) == 0
    create_server.assert_called_once()
    run_server.assert_called_once_with(create_server.return_value, transport="http", host="0.0.0.0", port=8080)


def test_handle_serve_without_api_key(mock_ui, mocker):
    run_server = mocker.patch("marsmcp.core.command_handler.run_server")
    handler = CommandHandler(config=MarsConfig(), ui=mock_ui)
    assert handler.handle_serve("stdio", "127.0.0.1", 3000) == 1
    run_server.assert_not_called()
    mock_ui.display_error.assert_called_once_with(MISSING_KEY_MESSAGE)


@pytest.mark.parametrize("server_error", [None, RuntimeError("port in use")])
def test_handle_serve_closes_client(mock_ui, mars_config, mocker, server_error):
    mocker.patch("marsmcp.core.command_handler.create_server")
    mocker.patch("marsmcp.core.command_handler.run_server", side_effect=server_error)
    client = MagicMock()
    client.aclose = AsyncMock()
    handler = CommandHandler(config=mars_config, ui=mock_ui, client_factory=lambda cfg: client)

    if server_error is None:
        assert handler.handle_serve("stdio", "127.0.0.1", 3000) == 0
    else:
        with pytest.raises(RuntimeError):
            handler.handle_serve("stdio", "127.0.0.1", 3000)
    client.aclose.assert_awaited_once()
