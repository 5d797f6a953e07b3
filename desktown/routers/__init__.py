"""API routers."""

from desktown.routers.admin import router as admin_router
from desktown.routers.auth import router as auth_router
from desktown.routers.automations import router as automations_router
from desktown.routers.chat import router as chat_router
from desktown.routers.emails import router as emails_router
from desktown.routers.employee import router as employee_router
from desktown.routers.jobs import router as jobs_router
from desktown.routers.meetings import router as meetings_router
from desktown.routers.notifications import router as notifications_router
from desktown.routers.offices import router as offices_router
from desktown.routers.posts import router as posts_router
from desktown.routers.profiles import router as profiles_router
from desktown.routers.public import router as public_router
from desktown.routers.services import router as services_router
from desktown.routers.statuses import router as statuses_router
from desktown.routers.storage import objects_router
from desktown.routers.storage import router as storage_router
from desktown.routers.tasks import router as tasks_router
from desktown.routers.tickets import router as tickets_router
from desktown.routers.transactions import router as transactions_router
from desktown.routers.users import router as users_router
from desktown.routers.webhooks import router as webhooks_router

__all__ = [
    "admin_router",
    "auth_router",
    "automations_router",
    "chat_router",
    "emails_router",
    "employee_router",
    "jobs_router",
    "meetings_router",
    "notifications_router",
    "objects_router",
    "offices_router",
    "posts_router",
    "profiles_router",
    "public_router",
    "services_router",
    "statuses_router",
    "storage_router",
    "tasks_router",
    "tickets_router",
    "transactions_router",
    "users_router",
    "webhooks_router",
]
