import sys

from .infra.rest_api.server import main

sys.exit(main())
