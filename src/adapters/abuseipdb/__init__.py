"""Cliente de la API REST de AbuseIPDB.

Por qué un paquete:
- Separa el pipeline HTTP (request), la decodificación y la paginación del
  cliente público que los combina.
"""

from adapters.abuseipdb.client import AbuseIPDBClient
from adapters.abuseipdb.request import JsonBody, RawStringBody, StreamBody, execute

__all__ = [
	"AbuseIPDBClient",
	"JsonBody",
	"RawStringBody",
	"StreamBody",
	"execute",
]
