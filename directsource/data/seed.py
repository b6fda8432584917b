# directsource/data/seed.py
from directsource.data.database import SessionLocal
from directsource.data.models import ManufacturerModel, UserModel

MANUFACTURERS = [
    {"id": "mfr-nordwood", "company_name": "Nordwood Furniture", "location": "Oslo, Norway", "established_year": 1998},
    {"id": "mfr-flaxhouse", "company_name": "Flaxhouse Textiles", "location": "Kaunas, Lithuania", "established_year": 2011},
    {"id": "mfr-forgeline", "company_name": "Forgeline Cookware", "location": "Sheffield, UK", "established_year": 1976},
]


def seed(db=None):
    own_session = db is None
    db = db or SessionLocal()
    try:
        # only seed if empty
        if db.query(ManufacturerModel).first():
            return
        for m in MANUFACTURERS:
            owner = UserModel(id=f"user-{m['id']}", name=m["company_name"], role="manufacturer")
            db.add(owner)
            db.add(
                ManufacturerModel(
                    user_id=owner.id,
                    verification_status="verified",
                    total_sales=0,
                    revenue=0,
                    **m,
                )
            )
        db.commit()
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    seed()
