# -*- coding: utf-8 -*-
"""
backend/app/modules/videos/__init__.py

Módulo Videos: entitlement (¿puede U ver V?) y tokens de acceso
de streaming / descarga. El catálogo de videos se gestiona en otro
servicio; aquí sólo se lee.
"""
