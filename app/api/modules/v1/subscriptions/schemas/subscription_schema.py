from pydantic import BaseModel


class SubscribeForm(BaseModel):
    """URL-encoded body of ``POST /subscriptions``.

    Both fields are required and kept verbatim: no trimming, no length limit
    and no email format check.
    """

    name: str
    email: str
