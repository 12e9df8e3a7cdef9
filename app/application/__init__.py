"""
===============================================================================
APPLICATION LAYER
===============================================================================

  - usecases/: casos de uso por feature (resultados tipados, sin HTTP).
  - seed_admin: alta idempotente del admin inicial al arrancar.
===============================================================================
"""
