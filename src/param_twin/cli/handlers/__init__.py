from .transform import handle_transform
from .corpus import handle_harvest, handle_populate
