"""
Seed catalog used on first run, before any cache or cloud data exists.
"""

from .models import CaseStudy, Product

INITIAL_PRODUCTS: list[dict] = [
    {
        "id": "type-c",
        "model": "VER-LITE",
        "name": "Type C: Lite Edition (entry level)",
        "category": "Software",
        "subCategory": "3D Digital Showroom",
        "price": "¥10,000 (first build)",
        "description": (
            "A concept space for start-ups with basic AI interaction and a 24/7 AI "
            "receptionist. Adapts to desktop, mobile and casting; goes live fast."
        ),
        "features": [
            "Concept space + basic AI interaction",
            "24/7 AI receptionist",
            "Fast launch, high value",
            "Multi-device (desktop / mobile / casting)",
        ],
        "specs": [
            "Content: 2 videos + 2 voice tours + 1 knowledge base",
            "Use case: start-ups, quick showcases",
            "Operations: 3 months included (5 concurrent users)",
            "Renewal: ¥2,000/quarter or ¥5,000/year",
        ],
        "imageUrl": "https://images.unsplash.com/photo-1497215728101-856f4ea42174?w=800&auto=format&fit=crop&q=60",
        "brochureUrl": "",
    },
    {
        "id": "type-b",
        "model": "VER-STD-PRO",
        "name": "Type B: Standard Pro Edition (best seller)",
        "category": "Software",
        "subCategory": "3D Digital Showroom",
        "price": "¥30,000 - ¥50,000",
        "description": (
            "3D voice-guided showroom with deep walkthroughs for growing companies. "
            "Cloud rendering on every platform, optional custom digital presenter."
        ),
        "features": [
            "3D voice-guided showroom + walkthrough",
            "Optional custom digital presenter",
            "Cloud rendering (PC / mobile / tablet)",
            "Fast deployment",
        ],
        "specs": [
            "Content: 5 booth tours + 2 videos + 2 images + 1 model",
            "Pricing: ¥30k (no presenter) / ¥50k (with presenter)",
            "Operations: 3 months included (5 concurrent users)",
            "Renewal (with presenter): ¥20k/quarter or ¥60k/year",
        ],
        "imageUrl": "https://images.unsplash.com/photo-1557804506-669a67965ba0?w=800&auto=format&fit=crop&q=60",
        "brochureUrl": "",
    },
    {
        "id": "type-a",
        "model": "VER-FLAGSHIP",
        "name": "Type A: Flagship Custom Edition",
        "category": "Software",
        "subCategory": "3D Digital Showroom",
        "price": "¥100,000",
        "description": (
            "Fully custom design and development for headline companies and public "
            "exhibition halls, with on-premise deployment and large-screen support."
        ),
        "features": [
            "End-to-end custom design and development",
            "On-premise deployment + large screens",
            "Custom full-body digital presenter",
            "Premium service",
        ],
        "specs": [
            "Content: fully custom",
            "Use case: headline companies, government halls",
            "Operations: 3 months included (5 concurrent users)",
            "Renewal: ¥20,000/quarter or ¥60,000/year",
        ],
        "imageUrl": "https://images.unsplash.com/photo-1486406146926-c627a92ad1ab?w=800&auto=format&fit=crop&q=60",
        "brochureUrl": "",
    },
]

INITIAL_CASES: list[dict] = [
    {
        "id": "c1",
        "title": "Provincial smart-city exhibition hall (Type A)",
        "description": (
            "Flagship custom build with on-premise large screens and a government "
            "digital presenter, cutting guided-tour staffing costs."
        ),
        "imageUrl": "https://images.unsplash.com/photo-1556761175-5973dc0f32e7?w=800&auto=format&fit=crop&q=60",
        "linkUrl": "#",
    },
    {
        "id": "c2",
        "title": "Tech unicorn website 3D showroom (Type B)",
        "description": (
            "Standard Pro showroom with a branded digital presenter, giving investors "
            "and customers an immersive product walkthrough."
        ),
        "imageUrl": "https://images.unsplash.com/photo-1504384308090-c54be3853247?w=800&auto=format&fit=crop&q=60",
        "linkUrl": "#",
    },
]


def default_products() -> list[Product]:
    return [Product.model_validate(p) for p in INITIAL_PRODUCTS]


def default_cases() -> list[CaseStudy]:
    return [CaseStudy.model_validate(c) for c in INITIAL_CASES]
