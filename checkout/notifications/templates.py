"""Plain-text email bodies. Wording is Costa Rican Spanish, matching the storefront."""

from ..intake.types import PaymentMethod
from ..pricing import format_colones

SINPE_NUMBER = "6201-9914"
SINPE_HOLDER = "Rafael Garcia"
WHATSAPP = "7161-8029"


def _order_lines(order):
    lines = [
        f"Número de Orden: {order.order_id}",
        "Producto: DeepClean – Cámara WiFi HD 1080p",
        f"Cantidad: {order.quantity}",
        f"Color: {order.color}",
        f"Subtotal: {format_colones(order.subtotal)}",
        "Envío: GRATIS",
        f"Total: {format_colones(order.total)}",
        "",
        "Dirección de Envío:",
        order.address.line,
        f"{order.address.district}, {order.address.canton}, {order.address.province}",
    ]
    return lines


def customer_email(order):
    subject = f"Confirmación de Pedido {order.order_id} - DeepClean"
    lines = [f"Hola {order.name},", "", "Gracias por tu pedido. Aquí están los detalles:", ""]
    lines += _order_lines(order)
    lines.append("")

    if order.payment_method == PaymentMethod.BANK_TRANSFER:
        lines += [
            "Instrucciones de Pago SINPE",
            f"Número SINPE: {SINPE_NUMBER}",
            f"Nombre: {SINPE_HOLDER}",
            f"Monto: {format_colones(order.total)}",
            f"En el concepto/descripción escribí: {order.order_id}",
            f"Enviá el comprobante por WhatsApp al {WHATSAPP}",
        ]
    else:
        lines.append("Tu pago con tarjeta ha sido procesado exitosamente.")

    lines += ["", "Te contactaremos pronto para coordinar la entrega.", f"WhatsApp: {WHATSAPP}"]
    return subject, "\n".join(lines)


def admin_email(order):
    method = "SINPE Móvil" if order.payment_method == PaymentMethod.BANK_TRANSFER else "Tarjeta (Tilopay)"
    subject = f"Nueva Orden: {order.order_id} - {order.name}"
    lines = [
        f"Cliente: {order.name}",
        f"Teléfono: {order.phone}",
        f"Email: {order.email}",
        f"Método de pago: {method}",
        f"Estado: {order.payment_status}",
        f"ID Transacción: {order.transaction_id or '-'}",
        "",
    ]
    lines += _order_lines(order)
    if order.comment:
        lines += ["", f"Comentarios: {order.comment}"]
    return subject, "\n".join(lines)
