__title__ = 'scopeline'
__license__ = 'MIT'
__version__ = "0.1.0"

from .actions import *
from .context import *
from .faults import *
from .parameters import *
from .parser import *
from .registry import *
from .resolver import *
from .router import *
from .scoping import *
from .terminal import *
from .utils import Unset, UnsetType

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info",
    "Unset",
    "UnsetType",
)

# Load the exposed API of the actions
__all__ += actions.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parse context
__all__ += context.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parameters
__all__ += parameters.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parser
__all__ += parser.__all__  # type: ignore[attr-defined]
# Load the exposed API of the registry
__all__ += registry.__all__  # type: ignore[attr-defined]
# Load the exposed API of the resolver
__all__ += resolver.__all__  # type: ignore[attr-defined]
# Load the exposed API of the router
__all__ += router.__all__  # type: ignore[attr-defined]
# Load the exposed API of the scoping controller
__all__ += scoping.__all__  # type: ignore[attr-defined]
# Load the exposed API of the terminal sinks
__all__ += terminal.__all__  # type: ignore[attr-defined]
