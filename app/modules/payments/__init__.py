# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/__init__.py

Módulo de compras de Vidmarket.

Este módulo gestiona:
- Ledger de compras (Purchase) y su máquina de estados
- Creación de PaymentIntents con exclusión mutua por (usuario, video)
- Fulfillment idempotente a partir de webhooks de la pasarela
- Historial de compras, ventas del creador y cancelación

Estructura:
- enums: PurchaseStatus
- models: Purchase
- repositories: PurchaseRepository (ledger)
- adapters: PaymentGatewayAdapter / StripeGatewayAdapter
- services: PurchaseIntentService, WebhookFulfillmentService
- schemas / routes: superficie HTTP
"""
