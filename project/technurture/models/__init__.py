from technurture.models.user import User
from technurture.models.lead import Contact, Enrollment
from technurture.models.blog import BlogPost
from technurture.models.form import DynamicForm, FormSubmission

__all__ = ["User", "Contact", "Enrollment", "BlogPost", "DynamicForm", "FormSubmission"]
