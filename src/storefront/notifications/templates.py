"""Email templates for customer notifications."""

from enum import Enum

from storefront.config import STORE_NAME


class EmailKind(Enum):
    ORDER_SHIPPED = "order_shipped"
    ORDER_DELIVERED = "order_delivered"
    TRACKING_UPDATE = "tracking_update"
    STORE_REOPENED = "store_reopened"


# Carrier status → short customer-facing sentence
_TRACKING_PHRASES = {
    "ENTREGADO": "fue entregado",
    "EN_TRANSITO": "está en camino",
    "EN_SUCURSAL": "está disponible para retirar en sucursal",
    "RETENIDO_ADUANA": "está retenido en aduana",
    "NO_ENTREGADO": "no pudo ser entregado",
    "DEVUELTO": "fue devuelto al remitente",
}


class OrderShippedTemplate:
    kind = EmailKind.ORDER_SHIPPED

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return {
            "subject": f"Tu pedido #{order_id} fue despachado",
            "body": (
                f"Hola {context.get('customer_name', '')},\n\n"
                f"Tu pedido #{order_id} ya está en manos de Correo Argentino.\n"
                f"Número de seguimiento: {context.get('tracking_number', 'N/A')}\n\n"
                f"Gracias por comprar en {STORE_NAME}."
            ),
        }


class OrderDeliveredTemplate:
    kind = EmailKind.ORDER_DELIVERED

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return {
            "subject": f"Tu pedido #{order_id} fue entregado",
            "body": (
                f"Hola {context.get('customer_name', '')},\n\n"
                f"Registramos la entrega de tu pedido #{order_id}. ¡Esperamos que lo disfrutes!\n\n"
                f"{STORE_NAME}"
            ),
        }


class TrackingUpdateTemplate:
    kind = EmailKind.TRACKING_UPDATE

    @staticmethod
    def render(context: dict) -> dict:
        status = context.get("carrier_status", "")
        phrase = _TRACKING_PHRASES.get(status, "tiene novedades")
        lines = [
            f"Hola {context.get('customer_name', '')},",
            "",
            f"Tu envío {context.get('tracking_number', '')} {phrase}.",
        ]
        if context.get("description"):
            lines.append(f"Detalle: {context['description']}")
        if context.get("branch_name"):
            lines.append(f"Sucursal: {context['branch_name']}")
        return {"subject": f"Novedades de tu envío - {STORE_NAME}", "body": "\n".join(lines)}


class StoreReopenedTemplate:
    kind = EmailKind.STORE_REOPENED

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": f"¡{STORE_NAME} volvió a abrir!",
            "body": (
                "Hola,\n\n"
                "Nos pediste que te avisáramos cuando volviéramos de vacaciones. "
                "Ya estamos tomando pedidos otra vez.\n\n"
                f"{STORE_NAME}"
            ),
        }


TEMPLATE_REGISTRY: dict[EmailKind, type] = {
    template.kind: template
    for template in (OrderShippedTemplate, OrderDeliveredTemplate, TrackingUpdateTemplate, StoreReopenedTemplate)
}


def render(kind: EmailKind, context: dict) -> dict:
    return TEMPLATE_REGISTRY[kind].render(context)
