"""
SQLAlchemy models for the soil health datastore.

Geometry is kept as GeoJSON text so the same schema runs on PostgreSQL and
SQLite; spatial work happens in Python with shapely.
"""
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import relationship

from soil_health.database import Base
from soil_health.services.nutrient_classifier import classify


# -----------------------------------------------------------------------------
# Farmers and auth
# -----------------------------------------------------------------------------
class Farmer(Base):
    __tablename__ = "farmers"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    postal_code = Column(String(6), nullable=False, index=True)
    district_id = Column(Integer, ForeignKey("districts.id", ondelete="SET NULL"), nullable=True)
    district_name = Column(Text)
    state_name = Column(Text)
    full_name = Column(Text)
    phone = Column(String(15))
    email = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True)

    tokens = relationship("AuthToken", back_populates="farmer", cascade="all, delete-orphan")
    recommendations = relationship(
        "FertilizerRecommendation", back_populates="farmer", cascade="all, delete-orphan"
    )


class AuthToken(Base):
    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True)
    token = Column(String(128), unique=True, nullable=False, index=True)
    farmer_id = Column(Integer, ForeignKey("farmers.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)
    revoked = Column(Boolean, default=False)

    farmer = relationship("Farmer", back_populates="tokens")

    def is_valid(self) -> bool:
        return not self.revoked and datetime.utcnow() < self.expires_at


# -----------------------------------------------------------------------------
# Geography
# -----------------------------------------------------------------------------
class State(Base):
    __tablename__ = "states"

    id = Column(Integer, primary_key=True)
    name = Column(Text, unique=True, nullable=False)
    code = Column(String(2), unique=True, nullable=False)
    geometry = Column(Text, nullable=True)  # GeoJSON MultiPolygon
    population = Column(Integer)
    area_km2 = Column(Float)
    created_at = Column(DateTime, default=datetime.utcnow)

    districts = relationship("District", back_populates="state")


class District(Base):
    __tablename__ = "districts"
    __table_args__ = (UniqueConstraint("name", "state_name", name="unique_district_state"),)

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False, index=True)
    state_id = Column(Integer, ForeignKey("states.id", ondelete="CASCADE"))
    state_name = Column(Text, nullable=False, index=True)
    geometry = Column(Text, nullable=False)  # GeoJSON MultiPolygon
    area_km2 = Column(Float)
    population = Column(Integer)
    agricultural_area_km2 = Column(Float)
    created_at = Column(DateTime, default=datetime.utcnow)

    state = relationship("State", back_populates="districts")
    soil_records = relationship("SoilHealthData", back_populates="district", cascade="all, delete-orphan")


# -----------------------------------------------------------------------------
# Soil health aggregates
# -----------------------------------------------------------------------------
class SoilHealthData(Base):
    __tablename__ = "soil_health_data"
    __table_args__ = (
        UniqueConstraint("district_id", "measurement_year", "season", name="unique_district_year_season"),
    )

    id = Column(Integer, primary_key=True)
    district_id = Column(Integer, ForeignKey("districts.id", ondelete="CASCADE"), index=True)
    district_name = Column(Text, nullable=False)
    state_name = Column(Text, nullable=False)

    # NPK kg/ha
    nitrogen_avg = Column(Float)
    nitrogen_status = Column(String(20))
    phosphorus_avg = Column(Float)
    phosphorus_status = Column(String(20))
    potassium_avg = Column(Float)
    potassium_status = Column(String(20))

    ph_avg = Column(Float)
    organic_carbon = Column(Float)
    ec_avg = Column(Float)  # dS/m

    # Micronutrients ppm
    zinc_avg = Column(Float)
    iron_avg = Column(Float)
    copper_avg = Column(Float)
    manganese_avg = Column(Float)
    boron_avg = Column(Float)
    sulphur_avg = Column(Float)

    samples_analyzed = Column(Integer)
    measurement_year = Column(Integer, index=True)
    season = Column(String(20))
    data_source = Column(Text)
    last_updated = Column(DateTime, default=datetime.utcnow)

    district = relationship("District", back_populates="soil_records")


def _status_or_none(value, kind):
    return classify(value, kind).value if value is not None else None


@event.listens_for(SoilHealthData, "before_insert")
@event.listens_for(SoilHealthData, "before_update")
def update_nutrient_status(mapper, connection, target):
    """Keep the status columns derived from the averages."""
    target.nitrogen_status = _status_or_none(target.nitrogen_avg, "N")
    target.phosphorus_status = _status_or_none(target.phosphorus_avg, "P")
    target.potassium_status = _status_or_none(target.potassium_avg, "K")
    target.last_updated = datetime.utcnow()


# -----------------------------------------------------------------------------
# Crops and recommendations
# -----------------------------------------------------------------------------
class CropReference(Base):
    __tablename__ = "crop_recommendations"

    id = Column(Integer, primary_key=True)
    crop_name = Column(Text, nullable=False)
    crop_type = Column(String(50))

    # Optimal ranges kg/ha
    nitrogen_min = Column(Float)
    nitrogen_max = Column(Float)
    phosphorus_min = Column(Float)
    phosphorus_max = Column(Float)
    potassium_min = Column(Float)
    potassium_max = Column(Float)

    ph_min = Column(Float)
    ph_max = Column(Float)
    organic_carbon_min = Column(Float)

    season = Column(String(20))
    water_requirement = Column(String(20))
    created_at = Column(DateTime, default=datetime.utcnow)


class FertilizerRecommendation(Base):
    __tablename__ = "fertilizer_recommendations"

    id = Column(Integer, primary_key=True)
    farmer_id = Column(Integer, ForeignKey("farmers.id", ondelete="CASCADE"), index=True)

    district_name = Column(Text)
    state_name = Column(Text)
    crop_name = Column(Text, nullable=False)
    season = Column(String(20))

    nitrogen_value = Column(Float)
    phosphorus_value = Column(Float)
    potassium_value = Column(Float)
    ph_value = Column(Float)

    urea_dose = Column(Float)
    dap_dose = Column(Float)
    mop_dose = Column(Float)
    ssp_dose = Column(Float)
    lime_dose = Column(Float, nullable=True)

    basal_dose = Column(Text)
    first_topdress = Column(Text)
    second_topdress = Column(Text)

    input_data = Column(JSON)
    results = Column(JSON)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    farmer = relationship("Farmer", back_populates="recommendations")
