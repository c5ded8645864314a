# Importing the tool modules registers them with tools.registry.registry.
from tools.ledger import summary  # noqa: F401
from tools.detect import behaviour  # noqa: F401
from tools.insights import generate  # noqa: F401
from tools.budget import window  # noqa: F401
