from werkzeug.security import generate_password_hash, check_password_hash
from website_admin.extensions import db
from website_admin.domain.permissions import DEFAULT_ROLE, permissions_for
from .base import BaseModel


class User(BaseModel):
    __tablename__ = 'users'

    email = db.Column(db.String(120), unique=True, nullable=False)
    display_name = db.Column(db.String(120), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)

    role = db.Column(db.String(20), nullable=False, default=DEFAULT_ROLE)  # Admin | Editor | Viewer
    extra_permissions = db.Column(db.JSON, nullable=False, default=list)
    is_active = db.Column(db.Boolean, default=True)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def permissions(self):
        return sorted(permissions_for(self.role, self.extra_permissions))

    @property
    def label(self):
        return self.display_name or self.email
