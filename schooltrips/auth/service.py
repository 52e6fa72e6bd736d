from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional
from schooltrips.models import User
from schooltrips.auth.schemas import UserCreate, UserRole
from schooltrips.auth.utils import get_password_hash, verify_password

class UserService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email.lower()).first()
    
    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()
    
    @staticmethod
    def create_user(db: Session, user: UserCreate, role: UserRole = UserRole.CLIENT) -> User:
        """Create a new user; self-registration always yields a client"""
        db_user = User(
            name=user.name,
            email=user.email.lower(),
            password=get_password_hash(user.password),
            role=role.value,
            school=user.school,
            phone=user.phone
        )
        
        try:
            db.add(db_user)
            db.commit()
            db.refresh(db_user)
            return db_user
        except IntegrityError:
            db.rollback()
            raise ValueError("Email already registered")
    
    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
        """Authenticate user with email and password"""
        user = UserService.get_user_by_email(db, email)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.password):
            return None
        return user
    
    @staticmethod
    def is_admin(user: User) -> bool:
        return user.role == UserRole.ADMIN.value
