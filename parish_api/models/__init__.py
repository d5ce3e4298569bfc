from .diocese import Diocese  # noqa: F401
from .parish import Parish  # noqa: F401
from .community import Community  # noqa: F401
from .user import RefreshToken, User  # noqa: F401
from .member import Member  # noqa: F401
from .pastoral import CommunityPastoral, GlobalPastoral, PastoralGroup, PastoralMember  # noqa: F401
from .event import Event, EventParticipant, EventPastoral, EventPastoralAssignment  # noqa: F401
from .schedule import Schedule, ScheduleAssignment  # noqa: F401
from .mass_intention import MassIntention  # noqa: F401
from .mass_schedule import MassSchedule  # noqa: F401
from .news import News  # noqa: F401
from .prayer_request import PrayerRequest  # noqa: F401
