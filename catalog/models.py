# catalog/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Union

Number = Union[int, float]


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    description: str
    price: Number
    quantity: Number
    image_url: str = Field(alias="imageUrl")


class ProductWithImage(Product):
    # base64 of the stored image file
    image: str


class User(BaseModel):
    token: str
    admin: bool = False

    def is_admin(self) -> bool:
        return self.admin


class Identity(BaseModel):
    token: str


class HealthResponse(BaseModel):
    status: str
    service: str
