from .user import User
from .movie import Movie
from .show import Show
from .booking import Booking
