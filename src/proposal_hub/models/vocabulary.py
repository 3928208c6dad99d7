"""Closed vocabularies for proposal categorization."""

from pydantic import BaseModel, Field

DEFAULT_CATEGORIES: list[str] = [
    "Chatbots",
    "Predictive Analytics",
    "Computer Vision",
    "Recommendation Systems",
    "Machine Learning",
    "Natural Language Processing",
    "Deep Learning",
    "Robotic Process Automation",
    "Voice Recognition",
    "Image Recognition",
    "Sentiment Analysis",
    "Healthcare AI",
    # The posting wizard files needs under their data type
    "Images",
    "Text",
    "Audio",
    "Video",
    "Structured Data",
    "Mixed",
    "Other",
]

DEFAULT_INDUSTRIES: list[str] = [
    "Healthcare",
    "E-commerce",
    "Finance",
    "Technology",
    "Manufacturing",
    "Education",
    "Retail",
    "Real Estate",
    "Travel",
    "Media",
    "Automotive",
    "Other",
]

DEFAULT_DATA_TYPES: list[str] = [
    "Images",
    "Text",
    "Audio",
    "Video",
    "Structured Data",
    "Mixed",
    "Other",
]

DEFAULT_COMPLIANCE: list[str] = [
    "HIPAA",
    "GDPR",
    "SOC 2",
    "PCI DSS",
    "ISO 27001",
    "None Required",
    "Other",
]


class Vocabulary(BaseModel):
    """Allowed values for category, industry, data type and compliance tags."""

    categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    industries: list[str] = Field(default_factory=lambda: list(DEFAULT_INDUSTRIES))
    data_types: list[str] = Field(default_factory=lambda: list(DEFAULT_DATA_TYPES))
    compliance_options: list[str] = Field(default_factory=lambda: list(DEFAULT_COMPLIANCE))
