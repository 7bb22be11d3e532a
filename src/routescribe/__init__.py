"""Static OpenAPI document builder for annotated Python sources."""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
