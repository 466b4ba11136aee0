__version__: str = "2.0.0"

from .config import MediaConfig  # NOQA: F401,E402
from .errors import MalformedPath, NotFound, OutsideRoot  # NOQA: F401,E402
from .paths import PathResolver, ResolvedPath  # NOQA: F401,E402

# EOF
