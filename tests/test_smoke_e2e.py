import functools
import http.server
import socketserver
import threading
from pathlib import Path
from collections.abc import Iterator

import pytest
import pytest_asyncio

from browser_focus.core.errors import IndexOutOfRangeError, UnderlyingSessionError
from browser_focus.core.interface import AutomationInterface
from browser_focus.core.models import ElementRef
from browser_focus.core.settings import Settings

pytestmark = pytest.mark.e2e


@pytest.fixture(scope="session")
def web_server() -> Iterator[str]:
    root = Path(__file__).resolve().parent / "fixtures"
    Handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(root))
    httpd = socketserver.TCPServer(("127.0.0.1", 0), Handler)
    port = httpd.server_address[1]
    t = threading.Thread(target=httpd.serve_forever, daemon=True)
    t.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        httpd.shutdown()
        httpd.server_close()


@pytest_asyncio.fixture
async def browser():
    iface = AutomationInterface(
        Settings(headless=True, default_timeout_ms=10_000, window_timeout_ms=5_000, _env_file=None)
    )
    try:
        await iface.start()
    except UnderlyingSessionError as e:
        pytest.skip(f"no Playwright browser available: {e}")
    try:
        yield iface
    finally:
        await iface.stop()


@pytest.mark.asyncio
async def test_popup_focus_and_close(browser: AutomationInterface, web_server: str) -> None:
    index_url = f"{web_server}/index.html"
    popup_url = f"{web_server}/popup.html"

    await browser.go(index_url)
    assert await browser.get_title() == "Index"

    await browser.click("#popup")
    assert await browser.wait_for_window() == 2
    assert await browser.get_title() == "Index"

    await browser.focus_window(1)
    assert await browser.text("#greeting") == "hello from the popup"
    await browser.close_window()
    assert await browser.get_url() == index_url

    await browser.open_window(popup_url)
    assert await browser.get_title() == "Popup"
    await browser.focus_window("Index")
    assert await browser.get_url() == index_url
    await browser.focus_window(popup_url)
    assert await browser.get_title() == "Popup"

    with pytest.raises(IndexOutOfRangeError, match="-1 current size: 2"):
        await browser.focus_window(-1)
    assert await browser.get_title() == "Popup"


@pytest.mark.asyncio
async def test_frames(browser: AutomationInterface, web_server: str) -> None:
    await browser.go(f"{web_server}/index.html")
    assert await browser.text("h2") == "The magic of iframes"

    for ref in (0, "imgbox", ElementRef(selector="#imgbox")):
        await browser.focus_frame(ref)
        assert await browser.attribute("#ball", "src") == f"{web_server}/ball.gif"
        await browser.focus_default()
        assert await browser.text("h2") == "The magic of iframes"


@pytest.mark.asyncio
async def test_scripts_and_dialogs(browser: AutomationInterface, web_server: str) -> None:
    await browser.go(f"{web_server}/index.html")
    assert await browser.is_dialog_visible() is False

    await browser.execute_javascript("alert(arguments[0] + ' and ' + arguments[1])", "two", "three")
    assert await browser.is_dialog_visible() is True
    assert await browser.dialog_text() == "two and three"
    await browser.accept_dialog()
    assert await browser.is_dialog_visible() is False

    assert await browser.execute_javascript("return 12;") == 12
    result = await browser.execute_async_javascript(
        "window.setTimeout(() => arguments[arguments.length - 1]('Hello World!'), 50);"
    )
    assert result == "Hello World!"


@pytest.mark.asyncio
async def test_history(browser: AutomationInterface, web_server: str) -> None:
    urls = [f"{web_server}/{name}.html" for name in ("index", "popup", "frame")]
    for url in urls:
        await browser.go(url)
    await browser.backward()
    assert await browser.get_url() == urls[1]
    await browser.backward()
    assert await browser.get_url() == urls[0]
    await browser.forward()
    assert await browser.get_url() == urls[1]
    await browser.refresh()
    assert await browser.get_url() == urls[1]
