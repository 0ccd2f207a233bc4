"""Bundled mock listings for the in-memory backend and SQLite seeding."""

from datetime import UTC, datetime
from typing import Final

from property_browser.models import Property, SavedProperty


def _listing(**fields: object) -> Property:
    return Property.model_validate(fields)


MOCK_PROPERTIES: Final[tuple[Property, ...]] = (
    _listing(
        id=1,
        name="Modern Beverly Hills Estate",
        address="1200 Benedict Canyon Dr",
        city="Beverly Hills",
        state="CA",
        zip_code="90210",
        price=4_850_000,
        property_type="House",
        bedrooms=5,
        bathrooms=5.5,
        square_feet=6200,
        year_built=2018,
        description=(
            "Architectural estate with walls of glass, canyon views and an "
            "open-plan kitchen built for entertaining."
        ),
        features=["Infinity pool", "Three-car garage", "Home theater", "Wine cellar"],
        images=[
            "https://images.unsplash.com/photo-1613490493576-7fde63acd811",
            "https://images.unsplash.com/photo-1613977257363-707ba9348227",
            "https://images.unsplash.com/photo-1600596542815-ffad4c1539a9",
        ],
        listing_date=datetime(2024, 3, 2, 9, 0, tzinfo=UTC),
        status="For Sale",
    ),
    _listing(
        id=2,
        name="Downtown Loft Condo",
        address="455 Main St, Unit 1204",
        city="Austin",
        state="TX",
        zip_code="78701",
        price=615_000,
        property_type="Condo",
        bedrooms=2,
        bathrooms=2,
        square_feet=1350,
        year_built=2009,
        description="Corner loft with floor-to-ceiling windows and skyline views.",
        features=["Rooftop pool", "Concierge", "Fitness center", "Garage parking"],
        images=[
            "https://images.unsplash.com/photo-1522708323590-d24dbb6b0267",
            "https://images.unsplash.com/photo-1502672260266-1c1ef2d93688",
        ],
        listing_date=datetime(2024, 2, 27, 14, 30, tzinfo=UTC),
        status="For Sale",
    ),
    _listing(
        id=3,
        name="Historic Brownstone Townhouse",
        address="87 Willow St",
        city="Brooklyn",
        state="NY",
        zip_code="11201",
        price=3_200_000,
        property_type="Townhouse",
        bedrooms=4,
        bathrooms=3.5,
        square_feet=3400,
        year_built=1899,
        description=(
            "Restored brownstone with original moldings, a chef's kitchen and a "
            "private garden."
        ),
        features=["Private garden", "Fireplace", "Roof deck", "Original details"],
        images=[
            "https://images.unsplash.com/photo-1600585154340-be6161a56a0c",
            "https://images.unsplash.com/photo-1600607687939-ce8a6c25118c",
        ],
        listing_date=datetime(2024, 2, 20, 11, 0, tzinfo=UTC),
        status="Pending",
    ),
    _listing(
        id=4,
        name="Lakeview Apartment",
        address="2800 N Lake Shore Dr, Apt 905",
        city="Chicago",
        state="IL",
        zip_code="60657",
        price=389_000,
        property_type="Apartment",
        bedrooms=1,
        bathrooms=1,
        square_feet=820,
        year_built=1972,
        description="Bright one-bedroom overlooking the lake, steps from the park.",
        features=["Lake views", "Doorman", "In-unit laundry"],
        images=["https://images.unsplash.com/photo-1493809842364-78817add7ffb"],
        listing_date=datetime(2024, 2, 14, 8, 15, tzinfo=UTC),
        status="For Sale",
    ),
    _listing(
        id=5,
        name="Craftsman Family Home",
        address="3315 SE Belmont St",
        city="Portland",
        state="OR",
        zip_code="97214",
        price=749_000,
        property_type="House",
        bedrooms=3,
        bathrooms=2.5,
        square_feet=2100,
        year_built=1924,
        description="Classic craftsman with a wraparound porch and updated kitchen.",
        features=["Wraparound porch", "Detached garage", "Fenced yard", "Hardwood floors"],
        images=[
            "https://images.unsplash.com/photo-1570129477492-45c003edd2be",
            "https://images.unsplash.com/photo-1568605114967-8130f3a36994",
        ],
        listing_date=datetime(2024, 2, 9, 16, 45, tzinfo=UTC),
        status="For Sale",
    ),
    _listing(
        id=6,
        name="Desert Acreage",
        address="Lot 14 Saguaro Ridge Rd",
        city="Scottsdale",
        state="AZ",
        zip_code="85262",
        price=275_000,
        property_type="Land",
        bedrooms=0,
        bathrooms=0,
        square_feet=0,
        year_built=0,
        description="Five buildable acres with mountain views and utilities at the road.",
        features=["Mountain views", "Utilities available"],
        images=["https://images.unsplash.com/photo-1500382017468-9049fed747ef"],
        listing_date=datetime(2024, 1, 30, 10, 0, tzinfo=UTC),
        status="For Sale",
    ),
    _listing(
        id=7,
        name="Waterfront Townhouse",
        address="19 Harbor View Ln",
        city="Miami",
        state="FL",
        zip_code="33131",
        price=1_150_000,
        property_type="Townhouse",
        bedrooms=3,
        bathrooms=3,
        square_feet=2450,
        year_built=2015,
        description="Three-story townhouse on the bay with a private boat slip.",
        features=["Boat slip", "Private elevator", "Pool", "Two-car garage"],
        images=[
            "https://images.unsplash.com/photo-1512917774080-9991f1c4c750",
            "https://images.unsplash.com/photo-1600047509807-ba8f99d2cdde",
        ],
        listing_date=datetime(2024, 1, 22, 13, 20, tzinfo=UTC),
        status="Sold",
    ),
    _listing(
        id=8,
        name="Capitol Hill Condo",
        address="1520 E Pine St, Unit 3",
        city="Seattle",
        state="WA",
        zip_code="98122",
        price=529_000,
        property_type="Condo",
        bedrooms=2,
        bathrooms=1,
        square_feet=980,
        year_built=2001,
        description="Quiet top-floor condo near cafes with a sunny private balcony.",
        features=["Balcony", "Assigned parking", "Storage unit"],
        images=["https://images.unsplash.com/photo-1560448204-e02f11c3d0e2"],
        listing_date=datetime(2024, 1, 15, 9, 40, tzinfo=UTC),
        status="For Sale",
    ),
)

MOCK_SAVED_PROPERTIES: Final[tuple[SavedProperty, ...]] = (
    SavedProperty(
        id=1,
        property_id=2,
        saved_date=datetime(2024, 3, 4, 18, 5, tzinfo=UTC),
        notes="Ask about HOA fees",
    ),
    SavedProperty(
        id=2,
        property_id=5,
        saved_date=datetime(2024, 3, 1, 12, 0, tzinfo=UTC),
    ),
)
