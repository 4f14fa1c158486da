"""
Smart CV Database Seeder

Creates two password users and sample structured CVs:
- user1@example.com owns two "John Doe" CVs
- user2@example.com owns one "Jane Smith" CV
"""

from smartcv.db.session import SessionLocal, engine
from smartcv.db.base import Base
from smartcv.models.user import User
from smartcv.models.cv import Cv
from smartcv.core.security import get_password_hash

SAMPLE_FILE_URL = "https://res.cloudinary.com/demo/sample.pdf"

JOHN_DOE_CV = {
    "name": "John Doe",
    "email": "john.doe@example.com",
    "phone": "+1234567890",
    "education": [
        {
            "institution": "University of Technology",
            "degree": "Bachelor of Computer Science",
            "year": "2018-2022",
        }
    ],
    "experience": [
        {
            "company": "Tech Corp",
            "position": "Software Developer",
            "duration": "2022-Present",
            "description": "Developed web applications using React and Node.js",
        }
    ],
    "skills": ["JavaScript", "React", "Node.js", "PostgreSQL", "Git"],
}

JANE_SMITH_CV = {
    "name": "Jane Smith",
    "email": "jane.smith@example.com",
    "education": [{"institution": "University B", "degree": "Master of Design"}],
    "experience": [{"company": "Company B", "position": "Product Designer"}],
    "skills": ["Figma", "Adobe XD"],
}


def seed_database():
    """Seed the database with test data."""

    # Create all tables
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()

    try:
        # Check if already seeded
        existing_user = db.query(User).filter(User.email == "user1@example.com").first()
        if existing_user:
            print("Database already seeded. Skipping...")
            return

        print("Seeding database...")

        user1 = User(
            email="user1@example.com",
            hashed_password=get_password_hash("password123"),
            auth_provider="password",
        )
        user2 = User(
            email="user2@example.com",
            hashed_password=get_password_hash("password456"),
            auth_provider="password",
        )
        db.add_all([user1, user2])
        db.flush()  # Get IDs

        db.add_all([
            Cv(user_id=user1.id, original_file_url=SAMPLE_FILE_URL, generated_cv=JOHN_DOE_CV),
            Cv(user_id=user1.id, original_file_url=SAMPLE_FILE_URL, generated_cv=dict(JOHN_DOE_CV)),
            Cv(user_id=user2.id, original_file_url=SAMPLE_FILE_URL, generated_cv=JANE_SMITH_CV),
        ])

        db.commit()

        print("✅ Database seeded successfully!")
        print("\n📋 Created Users:")
        print("   - user1@example.com (password: password123) [2 CVs]")
        print("   - user2@example.com (password: password456) [1 CV]")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
