from pydantic import BaseModel


class FavoriteStatus(BaseModel):
    cocktail_id: int
    is_favorite: bool


class FavoriteCount(BaseModel):
    count: int
