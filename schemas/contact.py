from pydantic import BaseModel


class ContactForm(BaseModel):
    name: str = ""
    email: str = ""
    subject: str = ""
    message: str = ""

    def is_complete(self) -> bool:
        return all(
            value.strip() for value in (self.name, self.email, self.subject, self.message)
        )
