from pydantic import BaseModel


class SearchResult(BaseModel):
    title: str
    url: str
    snippet: str
    searchPhrase: str = ""
