"""
Email templates for Air-o-Walk.

Inline CSS only, light theme with the app's green accent.
Each template function returns (subject, html_body, text_body).
"""

from __future__ import annotations

from html import escape

BG_PAGE = "#F3F7F4"
BG_CARD = "#FFFFFF"
GREEN = "#2E9E5B"
TEXT_PRIMARY = "#1B2B22"
TEXT_SECONDARY = "#5B6B62"
BORDER = "#DCE5DF"

APP_NAME = "Air-o-Walk"


def _base_layout(content: str) -> str:
    """Wrap content in the base email layout."""
    return f"""\
<!DOCTYPE html>
<html lang="es">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{APP_NAME}</title>
</head>
<body style="margin: 0; padding: 0; background-color: {BG_PAGE}; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;">
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="background-color: {BG_PAGE};">
        <tr>
            <td align="center" style="padding: 32px 16px;">
                <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="560" style="max-width: 560px; width: 100%;">
                    <tr>
                        <td align="center" style="padding-bottom: 24px;">
                            <span style="font-size: 22px; font-weight: 700; color: {GREEN};">{APP_NAME}</span>
                        </td>
                    </tr>
                    <tr>
                        <td style="background-color: {BG_CARD}; border: 1px solid {BORDER}; border-radius: 10px; padding: 32px 28px;">
                            {content}
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>"""


def _credential_rows(username: str, password: str) -> str:
    return f"""\
<table role="presentation" cellspacing="0" cellpadding="0" border="0" style="margin: 16px 0 24px 0;">
    <tr><td style="color: {TEXT_SECONDARY}; padding: 4px 16px 4px 0;">Usuario</td>
        <td style="color: {TEXT_PRIMARY}; font-weight: 700; font-family: monospace;">{escape(username)}</td></tr>
    <tr><td style="color: {TEXT_SECONDARY}; padding: 4px 16px 4px 0;">Contraseña</td>
        <td style="color: {TEXT_PRIMARY}; font-weight: 700; font-family: monospace;">{escape(password)}</td></tr>
</table>"""


def welcome_credentials(first_name: str | None, username: str, password: str) -> tuple[str, str, str]:
    """
    Sent when an application becomes an account. Carries the initial credentials.

    Returns:
        (subject, html_body, text_body)
    """
    name = escape(first_name or "")
    subject = "Gracias por crear tu cuenta"
    content = f"""\
<p style="color: {TEXT_PRIMARY}; font-size: 16px; margin: 0 0 12px 0;">Hola {name},</p>
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6; margin: 0;">
    Tu cuenta ha sido creada. Aquí tienes tus credenciales:
</p>
{_credential_rows(username, password)}
<p style="color: {TEXT_SECONDARY}; font-size: 13px; margin: 0;">Por favor cambia la contraseña al iniciar sesión.</p>"""
    text_body = (
        f"Hola {first_name or ''},\n\n"
        f"Tu cuenta ha sido creada. Aquí tienes tus credenciales:\n\n"
        f"  Usuario: {username}\n"
        f"  Contraseña: {password}\n\n"
        f"Por favor cambia la contraseña al iniciar sesión.\n\n"
        f"-- {APP_NAME}"
    )
    return subject, _base_layout(content), text_body


def temporary_password(username: str, password: str) -> tuple[str, str, str]:
    """
    Password recovery: the account's new temporary password.

    Returns:
        (subject, html_body, text_body)
    """
    subject = "Tu contraseña temporal"
    content = f"""\
<h2 style="color: {TEXT_PRIMARY}; font-size: 20px; margin: 0 0 16px 0;">Recuperación de contraseña</h2>
<p style="color: {TEXT_SECONDARY}; font-size: 15px; line-height: 1.6; margin: 0;">
    Hola <strong>{escape(username)}</strong>, tu nueva contraseña temporal es:
</p>
{_credential_rows(username, password)}
<p style="color: {TEXT_SECONDARY}; font-size: 13px; margin: 0;">Inicia sesión y cámbiala cuando quieras.</p>"""
    text_body = (
        f"Hola {username},\n\n"
        f"Tu nueva contraseña temporal es: {password}\n\n"
        f"Inicia sesión y cámbiala cuando quieras.\n\n"
        f"-- {APP_NAME}"
    )
    return subject, _base_layout(content), text_body
