from .base import *  # noqa: F403
from .ninja import *  # noqa: F403
from .observability import *  # noqa: F403
from .stripe import *  # noqa: F403
