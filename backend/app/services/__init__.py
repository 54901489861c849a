"""
Services Module

Boundaries to work that lives outside the request handlers:
- Mailer: welcome/farewell emails over SMTP
- Avatar: image resize and PNG re-encoding (Pillow)
"""
