from .booking import Booking, BookingCreate, BookingCreated, BookingStatus
from .show import Movie, OccupiedSeats, Show, ShowCreate
from .user import User
from .webhook import IdentityUserData, IdentityWebhook
