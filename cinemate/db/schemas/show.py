from datetime import date, datetime
from pydantic import BaseModel, Field


class Movie(BaseModel):
    id: int
    title: str
    overview: str | None = None
    poster_path: str | None = None
    release_date: date | None = None
    runtime: int | None = None
    vote_average: float | None = None

    class Config:
        from_attributes = True


class ShowCreate(BaseModel):
    movie_id: int
    show_datetime: datetime
    show_price: float = Field(ge=0)


class Show(BaseModel):
    id: int
    movie_id: int
    show_datetime: datetime
    show_price: float
    movie: Movie | None = None

    class Config:
        from_attributes = True


class OccupiedSeats(BaseModel):
    show_id: int
    occupied_seats: list[str]
