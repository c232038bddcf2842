import sys
import uuid
import psycopg2
from booking_admin.core.security import hash_password
from booking_admin.core.config import settings
from booking_admin.core.enums import UserRole
from urllib.parse import urlparse

def create_admin_user(email: str, password: str) -> bool:
    try:
        db_url = urlparse(settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://"))

        conn = psycopg2.connect(
            host=db_url.hostname or "localhost",
            port=db_url.port or 5432,
            user=db_url.username or "postgres",
            password=db_url.password or "postgres",
            database=db_url.path.lstrip("/") or "postgres"
        )

        cursor = conn.cursor()

        cursor.execute("SELECT id, role FROM users WHERE email = %s", (email,))
        existing_user = cursor.fetchone()

        if existing_user:
            print(f"Error: User '{email}' already exists (role: {existing_user[1].lower()})")
            cursor.close()
            conn.close()
            return False

        user_id = str(uuid.uuid4())
        hashed_password = hash_password(password)

        # SQLAlchemy's Enum column stores member names
        cursor.execute(
            "INSERT INTO users (id, email, password_hash, role, created_at, updated_at) "
            "VALUES (%s, %s, %s, %s, NOW(), NOW())",
            (user_id, email, hashed_password, UserRole.ADMIN.name)
        )
        conn.commit()

        print(f"Admin user '{email}' created successfully")
        print(f"User ID: {user_id}")
        print(f"Role: {UserRole.ADMIN}")

        cursor.close()
        conn.close()
        return True

    except Exception as e:
        print(f"Error creating admin user: {str(e)}")
        return False


def main():
    if len(sys.argv) < 3:
        print("Usage: python create_admin.py <email> <password>")
        sys.exit(1)

    email = sys.argv[1].strip()
    password = sys.argv[2]

    if not email or not password:
        print("Error: email and password cannot be empty")
        sys.exit(1)

    success = create_admin_user(email, password)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
