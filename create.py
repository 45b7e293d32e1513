# create.py: bootstrap the first admin employee
from getpass import getpass
from jobdesk import create_app
from jobdesk.extensions import db
from jobdesk.models.employee import Employee


def main():
    app = create_app()
    with app.app_context():
        email = input("Admin email: ").strip().lower()
        name = input("Full name: ").strip()
        phone = input("Phone (optional): ").strip()
        password = getpass("Password: ")

        # Check existing
        if Employee.query.filter_by(email=email).first():
            print("Employee with that email already exists.")
            return

        admin = Employee(name=name, email=email, phone=phone or None, role="admin")
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()
        print(f"Admin {email} created successfully.")

if __name__ == "__main__":
    main()
