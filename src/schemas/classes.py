from pydantic import BaseModel


class ClassesResponse(BaseModel):
    classes: list[str]
