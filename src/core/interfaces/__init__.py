"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan los llamadores.
- Permite enchufar mirrors de la API sin acoplar el Core a ellos.
"""
