"""Contratos de conversión de respuestas.

Cuando `report`/`bulk-report` apuntan a un mirror compatible (URL absoluta),
la respuesta puede no tener la forma `{data: ...}`. El llamador aporta un
conversor que transforma la respuesta cruda en el resultado tipado.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Protocol, TypeVar, Union, runtime_checkable

if TYPE_CHECKING:
    import httpx

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class ResponseConverter(Protocol[T_co]):
    """Convierte una respuesta HTTP en el resultado de la operación.

    Puede ser síncrono o devolver un awaitable.
    """

    def __call__(self, response: "httpx.Response") -> Union[T_co, Awaitable[T_co]]:
        ...
