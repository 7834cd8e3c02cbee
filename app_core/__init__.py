# NG-HEADER: Nombre de archivo: __init__.py
# NG-HEADER: Ubicación: app_core/__init__.py
# NG-HEADER: Descripción: Paquete de configuración central del backend de ventas.
# NG-HEADER: Lineamientos: Ver AGENTS.md
