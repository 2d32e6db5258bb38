from .base import DeliveryResult
from .email import EmailService, EmailAttachment, InlineImage, is_email_configured
from .sms import SMSService, is_sms_configured
from .whatsapp import WhatsAppService, is_whatsapp_configured
