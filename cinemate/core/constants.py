"""Common application-wide constants."""

# Job id prefix of the deferred seat-hold expiry check, one job per booking
RELEASE_SEATS_JOB_PREFIX = "release-seats"

# Textual reference APScheduler stores for the expiry job
RELEASE_SEATS_JOB_FUNC = "cinemate.workers.expiry:release_seats_and_delete_booking"

# Role claim granting access to the admin routes
ADMIN_ROLE = "admin"


__all__ = [
    "RELEASE_SEATS_JOB_PREFIX",
    "RELEASE_SEATS_JOB_FUNC",
    "ADMIN_ROLE",
]
