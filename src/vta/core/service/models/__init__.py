"""Domain models for the chat service layer.

Re-exports every public symbol so imports like
``from vta.core.service.models import ChatContext`` work.
"""

from .context import *  # noqa: F401, F403
from .errors import *  # noqa: F401, F403
from .service import *  # noqa: F401, F403
