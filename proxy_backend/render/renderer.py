from typing import Awaitable, Callable

from playwright.async_api import async_playwright

from proxy_backend.vars import (
    RENDER_TIMEOUT,
    RENDER_VIEWPORT_HEIGHT,
    RENDER_VIEWPORT_WIDTH,
)

Renderer = Callable[[str], Awaitable[str]]

CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


async def render_page(url: str) -> str:
    """
    Load ``url`` in headless Chromium and return the HTML after scripts ran.

    Waits for network idle, bounded by RENDER_TIMEOUT; Playwright raises
    its TimeoutError past that. The browser is closed on every path.
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True, args=CHROMIUM_ARGS)
        try:
            page = await browser.new_page(
                viewport={"width": RENDER_VIEWPORT_WIDTH, "height": RENDER_VIEWPORT_HEIGHT}
            )
            await page.goto(
                url,
                wait_until="networkidle",
                timeout=int(RENDER_TIMEOUT * 1000),
            )
            return await page.content()
        finally:
            await browser.close()


def get_renderer() -> Renderer:
    return render_page
