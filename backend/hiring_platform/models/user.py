from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from hiring_platform.database import Base


class UserRole(str, enum.Enum):
    """User role for role-based access control (RBAC)."""
    APPLICANT = "applicant"  # Job seeker - can analyze resumes and chat
    RECRUITER = "recruiter"  # Can post and manage own job postings
    ADMIN = "admin"  # Can manage every posting and view stats


class User(Base):
    __tablename__ = "users"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    
    role = Column(
        SQLEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.APPLICANT,
        index=True
    )
    
    # Recruiters and admins post jobs on behalf of their company
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True, index=True)
    company = relationship("Company", back_populates="members")
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN
    
    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles
