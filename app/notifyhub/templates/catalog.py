"""Built-in multilingual templates shipped with NotifyHub."""

from __future__ import annotations

from typing import Any, Dict

BUILTIN_TEMPLATES: Dict[str, Dict[str, Dict[str, Any]]] = {
    "email": {
        "welcome": {
            "en": {
                "subject": "Welcome to {{serviceName}}!",
                "body": (
                    "Hello {{userName}},\n\nWelcome to {{serviceName}}! We're excited to have you join us.\n\n"
                    "To get started, please verify your email by clicking on the link below:\n"
                    "{{verificationLink}}\n\n"
                    "If you have any questions, feel free to contact our support team at {{supportEmail}}.\n\n"
                    "Best regards,\nThe {{serviceName}} Team"
                ),
            },
            "es": {
                "subject": "¡Bienvenido a {{serviceName}}!",
                "body": (
                    "Hola {{userName}},\n\n¡Bienvenido a {{serviceName}}! Estamos encantados de que te unas a nosotros.\n\n"
                    "Para comenzar, verifica tu correo electrónico haciendo clic en el enlace a continuación:\n"
                    "{{verificationLink}}\n\n"
                    "Si tienes alguna pregunta, contacta a nuestro equipo de soporte en {{supportEmail}}.\n\n"
                    "Saludos cordiales,\nEl equipo de {{serviceName}}"
                ),
            },
            "fr": {
                "subject": "Bienvenue sur {{serviceName}} !",
                "body": (
                    "Bonjour {{userName}},\n\nBienvenue sur {{serviceName}} ! Nous sommes ravis de vous compter parmi nous.\n\n"
                    "Pour commencer, veuillez vérifier votre e-mail en cliquant sur le lien ci-dessous :\n"
                    "{{verificationLink}}\n\n"
                    "Si vous avez des questions, contactez notre équipe d'assistance à {{supportEmail}}.\n\n"
                    "Cordialement,\nL'équipe {{serviceName}}"
                ),
            },
        },
        "otp": {
            "en": {
                "subject": "Your verification code for {{serviceName}}",
                "body": (
                    "Hello {{userName}},\n\nYour verification code for {{serviceName}} is: {{otpCode}}\n\n"
                    "This code will expire in {{expiryTime}} minutes.\n\n"
                    "If you did not request this code, please ignore this email.\n\n"
                    "Best regards,\nThe {{serviceName}} Team"
                ),
            },
            "es": {
                "subject": "Tu código de verificación para {{serviceName}}",
                "body": (
                    "Hola {{userName}},\n\nTu código de verificación para {{serviceName}} es: {{otpCode}}\n\n"
                    "Este código caducará en {{expiryTime}} minutos.\n\n"
                    "Si no has solicitado este código, ignora este correo.\n\n"
                    "Saludos cordiales,\nEl equipo de {{serviceName}}"
                ),
            },
        },
        "passwordReset": {
            "en": {
                "subject": "Password Reset Request",
                "body": (
                    "Hello {{userName}},\n\nWe received a request to reset your password. "
                    "Use the link below to complete the process:\n{{resetLink}}\n\n"
                    "This link will expire in {{expiryTime}} minutes.\n\n"
                    "If you didn't request this reset, please contact {{supportEmail}}.\n\n"
                    "Best regards,\nThe {{serviceName}} Team"
                ),
            },
        },
        "orderConfirmation": {
            "en": {
                "subject": "Order #{{referenceNumber}} Confirmation",
                "body": (
                    "Hello {{userName}},\n\nThank you for your order #{{referenceNumber}}!\n\n"
                    "Total: {{amount}}\n\nThank you for shopping with {{serviceName}}!\n\n"
                    "Best regards,\nThe {{serviceName}} Team"
                ),
            },
        },
    },
    "sms": {
        "welcome": {
            "en": "Welcome to {{serviceName}}, {{userName}}! Your account has been created successfully. Reply HELP for assistance.",
            "es": "¡Bienvenido a {{serviceName}}, {{userName}}! Tu cuenta ha sido creada con éxito. Responde AYUDA para obtener asistencia.",
            "fr": "Bienvenue sur {{serviceName}}, {{userName}} ! Votre compte a été créé avec succès. Répondez AIDE pour obtenir de l'assistance.",
        },
        "otp": {
            "en": "Your {{serviceName}} verification code is {{otpCode}}. This code will expire in {{expiryTime}} minutes.",
            "es": "Tu código de verificación de {{serviceName}} es {{otpCode}}. Este código caducará en {{expiryTime}} minutos.",
            "fr": "Votre code de vérification {{serviceName}} est {{otpCode}}. Ce code expirera dans {{expiryTime}} minutes.",
        },
        "appointmentReminder": {
            "en": (
                "Reminder: Your appointment with {{serviceName}} is scheduled for {{appointmentDate}} "
                "at {{appointmentTime}}. Reply C to confirm or R to reschedule."
            ),
        },
    },
}
