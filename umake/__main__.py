import logging
import sys

from .arguments import options_from_arguments
from .errors import ConfigError
from .runner import run

_log = logging.getLogger("umake")


def main(argv=None) -> int:
    logging.basicConfig(format="umake: %(message)s", level=logging.INFO, stream=sys.stderr)
    try:
        options = options_from_arguments(argv)
    except ConfigError as e:
        _log.error("%s", e)
        return 1
    return run(options)


if __name__ == "__main__":
    sys.exit(main())
