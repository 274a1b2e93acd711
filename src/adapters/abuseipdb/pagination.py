"""Acumulador de páginas para `GET reports`."""

from __future__ import annotations

from typing import Awaitable, Callable

from core.domain.models import IPReport, ReportsPage

PAGE_SIZE = 100

PageFetcher = Callable[[int, int], Awaitable[ReportsPage]]


async def accumulate_pages(
    fetch_page: PageFetcher,
    limit: int,
    *,
    per_page: int = PAGE_SIZE,
) -> list[IPReport]:
    """Pide páginas desde la 1 hasta reunir `limit` resultados.

    `fetch_page(page_number, per_page)` hace una petición por página. Se para
    cuando no hay `next_page_url`, cuando una página llega vacía o al alcanzar
    `limit`; la última página se recorta para no superarlo.
    """

    if limit <= 0:
        raise ValueError("Limit has to be a positive value.")

    output: list[IPReport] = []
    page_number = 1
    while True:
        page = await fetch_page(page_number, per_page)
        remaining = limit - len(output)
        output.extend(page.results[:remaining])
        page_number += 1

        if page.next_page_url is None or not page.results or len(output) >= limit:
            return output
