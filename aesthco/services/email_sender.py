"""E-posta gönderimi: sipariş durum e-postaları ve partner bildirimleri (kurumsal HTML)."""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from aesthco.core.config import settings

log = logging.getLogger("aesthco.email")

STATUS_LABELS = {
    "PLACED": "Order Placed",
    "CONFIRMED": "Order Confirmed",
    "PACKED": "Packed",
    "OUT_FOR_DELIVERY": "Out for Delivery",
    "DELIVERED": "Delivered",
    "CANCELLED": "Cancelled",
    "RETURN_REQUESTED": "Return Requested",
    "RETURNED": "Returned",
}

_CURRENCY_SYMBOLS = {"INR": "₹", "EUR": "€", "USD": "$", "GBP": "£"}


def format_money(amount: int | None) -> str:
    """Paise -> '₹1,049.00'."""
    amount = int(amount or 0)
    symbol = _CURRENCY_SYMBOLS.get(settings.currency, settings.currency + " ")
    return f"{symbol}{amount // 100:,}.{amount % 100:02d}"


def _base_url() -> str:
    return (settings.frontend_url or "").strip().rstrip("/") or "http://127.0.0.1:8000"


def _shell(title: str, body: str, cta_url: str | None = None, cta_label: str | None = None) -> str:
    """Tek sütun kurumsal şablon: başlık bandı, gövde, opsiyonel buton, alt bilgi."""
    brand = escape(settings.brand_name or "Aesthco")
    cta = ""
    if cta_url and cta_label:
        cta = f"""
              <p style="margin:24px 0 0;text-align:center;">
                <a href="{escape(cta_url)}" style="display:inline-block;padding:14px 28px;background:#000000;color:#ffffff!important;text-decoration:none;font-weight:600;font-size:15px;border-radius:10px;">{escape(cta_label)}</a>
              </p>"""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{escape(title)}</title>
</head>
<body style="margin:0;padding:0;background-color:#f4f4f4;font-family:'Segoe UI',system-ui,-apple-system,sans-serif;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="background-color:#f4f4f4;">
    <tr>
      <td align="center" style="padding:32px 16px;">
        <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="max-width:560px;background:#ffffff;border-radius:16px;overflow:hidden;">
          <tr>
            <td style="background:#000000;padding:24px;text-align:center;font-size:20px;font-weight:700;color:#ffffff;letter-spacing:2px;">{brand}</td>
          </tr>
          <tr>
            <td style="padding:28px 24px;font-size:15px;line-height:1.6;color:#333333;">
              <h1 style="margin:0 0 24px;font-size:24px;font-weight:700;color:#000000;text-align:center;">{escape(title)}</h1>
              {body}{cta}
            </td>
          </tr>
          <tr>
            <td style="padding:16px 24px;border-top:1px solid #eeeeee;font-size:12px;color:#999999;text-align:center;">&copy; {brand}</td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def _items_table(items) -> str:
    if not items:
        return ""
    rows = []
    for item in items:
        variant = f"<span>{escape(item.variant)}</span><span style=\"color:#cccccc\"> | </span>" if item.variant else ""
        rows.append(
            f"""
        <tr>
          <td valign="top" style="padding:16px 0;border-bottom:1px solid #eeeeee;width:60px;">
            <img src="{escape(item.image_url or '')}" alt="{escape(item.name)}" style="width:60px;height:60px;object-fit:cover;border-radius:4px;background-color:#f4f4f4;display:block;" />
          </td>
          <td valign="top" style="padding:16px 12px;border-bottom:1px solid #eeeeee;">
            <div style="font-size:14px;font-weight:600;color:#000000;">{escape(item.name)}</div>
            <div style="font-size:13px;color:#666666;margin-top:4px;">{variant}<span>Qty: {item.quantity}</span></div>
          </td>
          <td valign="top" align="right" style="padding:16px 0;border-bottom:1px solid #eeeeee;white-space:nowrap;font-size:14px;font-weight:600;color:#000000;">{format_money(item.total_price)}</td>
        </tr>"""
        )
    return f"""
      <table width="100%" cellspacing="0" cellpadding="0" style="margin-top:24px;border-collapse:collapse;">
        <thead>
          <tr>
            <th align="left" colspan="2" style="font-size:11px;text-transform:uppercase;color:#999999;padding-bottom:12px;border-bottom:2px solid #000000;">Item</th>
            <th align="right" style="font-size:11px;text-transform:uppercase;color:#999999;padding-bottom:12px;border-bottom:2px solid #000000;">Total</th>
          </tr>
        </thead>
        <tbody>{''.join(rows)}
        </tbody>
      </table>"""


def _summary_box(order) -> str:
    shipping = "Free" if order.shipping_fee == 0 else format_money(order.shipping_fee)
    discount = ""
    if order.discount_amount:
        discount = f"""
          <tr>
            <td style="font-size:14px;color:#16a34a;padding-bottom:8px;">Discount</td>
            <td align="right" style="font-size:14px;color:#16a34a;padding-bottom:8px;">- {format_money(order.discount_amount)}</td>
          </tr>"""
    return f"""
      <div style="background-color:#f9f9f9;border-radius:8px;padding:20px;margin-top:20px;">
        <table width="100%" cellspacing="0" cellpadding="0">
          <tr>
            <td style="font-size:14px;color:#666666;padding-bottom:8px;">Subtotal</td>
            <td align="right" style="font-size:14px;color:#000000;padding-bottom:8px;">{format_money(order.subtotal)}</td>
          </tr>
          <tr>
            <td style="font-size:14px;color:#666666;padding-bottom:8px;">Shipping</td>
            <td align="right" style="font-size:14px;color:#000000;padding-bottom:8px;">{shipping}</td>
          </tr>{discount}
          <tr>
            <td style="padding-top:12px;border-top:1px solid #eeeeee;font-size:16px;font-weight:700;color:#000000;">Total</td>
            <td align="right" style="padding-top:12px;border-top:1px solid #eeeeee;font-size:16px;font-weight:700;color:#000000;">{format_money(order.total)}</td>
          </tr>
        </table>
      </div>"""


def _address_box(address) -> str:
    if address is None:
        return ""
    line2 = f"{escape(address.line2)}<br>" if address.line2 else ""
    city_line = ", ".join(escape(p) for p in (address.city, address.state, address.postal_code) if p)
    phone = f'<div style="margin-top:8px;font-size:14px;color:#666666;">Phone: {escape(address.phone)}</div>' if address.phone else ""
    return f"""
      <div style="margin-top:24px;padding:20px;border:1px solid #eeeeee;border-radius:8px;background-color:#fafafa;">
        <div style="font-size:11px;text-transform:uppercase;letter-spacing:1px;color:#999999;font-weight:700;margin-bottom:8px;">Delivery Address</div>
        <div style="font-size:14px;font-weight:700;color:#000000;margin-bottom:4px;">{escape(address.name or '')}</div>
        <div style="font-size:14px;color:#333333;line-height:1.5;">{escape(address.line1 or '')}<br>{line2}{city_line}</div>{phone}
      </div>"""


def build_order_status_email(order, status: str) -> tuple[str, str]:
    """Müşteriye durum e-postası. (subject, html_body)"""
    label = STATUS_LABELS.get(status, "Order Update")
    body = f"""
      <p style="margin:0 0 16px;">Hi {escape(order.customer_name or 'there')},</p>
      <p style="margin:0 0 24px;">Your order <strong>#{escape(order.id)}</strong> status has been updated to: <strong>{label}</strong>.</p>
      {_items_table(order.items)}
      {_summary_box(order)}
      <p style="margin-top:32px;font-size:13px;color:#999999;text-align:center;">We'll keep you posted on the next steps.</p>"""
    subject = f"{settings.brand_name}: {label} (#{order.id})"
    return subject, _shell(label, body, f"{_base_url()}/orders/{order.id}", "View Order")


def build_partner_new_order_email(order) -> tuple[str, str]:
    body = f"""
      <p style="margin:0 0 16px;">New order <strong>#{escape(order.id)}</strong> is ready to accept.</p>
      {_items_table(order.items)}
      {_address_box(order.address)}"""
    subject = f"{settings.brand_name}: New order #{order.id}"
    return subject, _shell("New Order Alert", body, f"{_base_url()}/partner", "Accept Order")


def build_partner_cancelled_email(order) -> tuple[str, str]:
    body = f"""
      <p style="margin:0 0 16px;">Order <strong>#{escape(order.id)}</strong> has been cancelled by the customer.</p>
      {_items_table(order.items)}
      {_address_box(order.address)}
      <p style="margin-top:24px;font-size:13px;color:#999999;text-align:center;">No action required.</p>"""
    subject = f"{settings.brand_name}: Order #{order.id} cancelled"
    return subject, _shell("Order Cancelled", body, f"{_base_url()}/partner", "Dashboard")


def build_partner_delivery_code_email(order_id: str, code: str) -> tuple[str, str]:
    body = f"""
      <p style="margin:0 0 16px;">Hi,</p>
      <p style="margin:0;">Order <strong>#{escape(order_id)}</strong> has been marked delivered. Use the code below to confirm delivery.</p>
      <div style="margin:24px 0;padding:20px;background:#f9f9f9;border-radius:8px;text-align:center;font-size:32px;font-weight:700;letter-spacing:8px;color:#000000;">{escape(code)}</div>
      <p style="margin:0;font-size:13px;color:#999999;text-align:center;">Keep this code confidential.</p>"""
    subject = f"Delivery code for order #{order_id}"
    return subject, _shell("Delivery Confirmation", body, f"{_base_url()}/partner", "Dashboard")


def is_mail_configured() -> bool:
    """SMTP ayarları dolu mu?"""
    return bool((settings.smtp_host or "").strip())


def send_email(to: str, subject: str, html_body: str, from_addr: str | None = None) -> bool:
    """Tek bir HTML e-posta gönderir. Başarılı ise True."""
    if not is_mail_configured():
        log.warning("SMTP not configured; email not sent to %s", to)
        return False
    host = settings.smtp_host.strip()
    port = int(settings.smtp_port or 587)
    user = (settings.smtp_user or "").strip()
    password = (settings.smtp_password or "").strip()
    from_addr = (from_addr or settings.smtp_from or "noreply@aesthco.com").strip()
    from_name = (settings.smtp_from_name or "").strip()
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{from_name} <{from_addr}>" if from_name else from_addr
    msg["To"] = to
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with smtplib.SMTP(host, port, timeout=15) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls()
            if user and password:
                smtp.login(user, password)
            smtp.sendmail(from_addr, [to], msg.as_string())
        log.info("Email sent to %s subject=%s", to, subject[:50])
        return True
    except Exception as e:
        log.exception("Failed to send email to %s: %s", to, e)
        return False


def send_order_email(to: str, subject: str, html_body: str) -> bool:
    """Sipariş e-postaları: ORDER_EMAIL_FROM tanımlıysa o adresten."""
    return send_email(to, subject, html_body, from_addr=(settings.order_email_from or "").strip() or None)
