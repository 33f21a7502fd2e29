# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/gateway_adapter.py

Contrato de la pasarela de pago usado por el core de compras.

El core sólo conoce esta interfaz:
- create_intent: crea el PaymentIntent y devuelve (id, client_secret)
- verify_event: autentica el webhook y lo normaliza a GatewayEvent
- cancel_intent: cancela un intent aún no cobrado

Autor: Vidmarket
Fecha: 2026-10-19
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


# Tipos de evento que el fulfillment reconoce
EVENT_PAYMENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_PAYMENT_FAILED = "payment_intent.payment_failed"
EVENT_PAYMENT_CANCELED = "payment_intent.canceled"
EVENT_PAYMENT_PROCESSING = "payment_intent.processing"

SUCCESS_EVENTS = frozenset({EVENT_PAYMENT_SUCCEEDED})
FAILURE_EVENTS = frozenset({EVENT_PAYMENT_FAILED, EVENT_PAYMENT_CANCELED})
NOOP_EVENTS = frozenset({EVENT_PAYMENT_PROCESSING})


class WebhookSignatureError(Exception):
    """Firma ausente o inválida; el webhook se rechaza con 400."""


@dataclass(frozen=True)
class GatewayIntent:
    """Resultado de crear un intent en la pasarela."""
    gateway_payment_id: str
    client_secret: str


@dataclass(frozen=True)
class GatewayEvent:
    """
    Evento de webhook ya autenticado y normalizado.

    amount viene en unidades menores (centavos) cuando la pasarela lo reporta;
    amount_malformed indica que el campo venía pero no era un entero.
    """
    event_id: str
    event_type: str
    gateway_payment_id: Optional[str]
    amount: Optional[int] = None
    amount_malformed: bool = False
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def purchase_id(self) -> Optional[str]:
        return self.metadata.get("purchaseId")


class PaymentGatewayAdapter(ABC):
    """Interfaz abstracta de la pasarela."""

    name: str = "abstract"

    @abstractmethod
    async def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> GatewayIntent:
        """
        Raises:
            PaymentError: la pasarela rechazó o no respondió (code GATEWAY_ERROR)
        """
        ...

    @abstractmethod
    def verify_event(self, raw_body: bytes, signature_header: Optional[str]) -> GatewayEvent:
        """
        Raises:
            WebhookSignatureError: firma ausente, inválida o payload ilegible
        """
        ...

    @abstractmethod
    async def cancel_intent(self, gateway_payment_id: str) -> None:
        ...


def _parse_amount(raw: Any) -> Tuple[Optional[int], bool]:
    """(amount, malformed). bool es subclase de int y no es un monto."""
    if raw is None:
        return None, False
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw, False
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip()), False
    return None, True


def event_from_payload(payload: Mapping[str, Any]) -> GatewayEvent:
    """
    Normaliza un evento con forma {id, type, data: {object: {...}}}.

    Nunca lanza: un payload con forma inesperada produce un evento sin
    gateway_payment_id (el fulfillment lo ignora).
    """
    data = payload.get("data")
    obj = data.get("object") if isinstance(data, dict) else None
    if not isinstance(obj, dict):
        obj = {}
    metadata = obj.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    gateway_payment_id = obj.get("id")
    amount, malformed = _parse_amount(obj.get("amount"))
    return GatewayEvent(
        event_id=str(payload.get("id") or ""),
        event_type=str(payload.get("type") or ""),
        gateway_payment_id=gateway_payment_id if isinstance(gateway_payment_id, str) else None,
        amount=amount,
        amount_malformed=malformed,
        metadata={str(k): str(v) for k, v in metadata.items()},
    )


__all__ = [
    "PaymentGatewayAdapter",
    "GatewayIntent",
    "GatewayEvent",
    "WebhookSignatureError",
    "event_from_payload",
    "EVENT_PAYMENT_SUCCEEDED",
    "EVENT_PAYMENT_FAILED",
    "EVENT_PAYMENT_CANCELED",
    "EVENT_PAYMENT_PROCESSING",
    "SUCCESS_EVENTS",
    "FAILURE_EVENTS",
    "NOOP_EVENTS",
]
