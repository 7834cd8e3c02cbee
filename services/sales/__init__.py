# NG-HEADER: Nombre de archivo: __init__.py
# NG-HEADER: Ubicación: services/sales/__init__.py
# NG-HEADER: Descripción: Lógica de ventas y parcelas (generación, conciliación, servicio).
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Dominio de ventas con pago en parcelas."""
