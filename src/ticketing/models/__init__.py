from .event import Event, EventCategory, Festival
from .promo import PromoCode, DiscountType
from .group import Group
from .ticket import Ticket, TicketStatus
from .waitlist import WaitlistEntry
from .email_template import EmailTemplate, EmailTemplateType, DEFAULT_TEMPLATES
