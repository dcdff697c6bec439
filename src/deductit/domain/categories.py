"""ATO deduction category taxonomy."""

from deductit.domain.errors import ValidationError, unknown_category

VEHICLES = "Vehicles, Travel & Transport"
WORK_TOOLS = "Work Tools, Equipment & Technology"
WORK_CLOTHING = "Work Clothing & Uniforms"
HOME_OFFICE = "Home Office Expenses"
EDUCATION = "Education & Training"
PROFESSIONAL_FEES = "Professional Memberships & Fees"
MEALS = "Meals & Entertainment (Work-Related)"
GROOMING = "Personal Grooming & Wellbeing"
GIFTS = "Gifts & Donations"
INVESTMENTS = "Investments, Insurance & Superannuation"
TAX_ACCOUNTING = "Tax & Accounting Expenses"

OTHER = "Other"

DEDUCTION_CATEGORIES: tuple[str, ...] = (
    VEHICLES,
    WORK_TOOLS,
    WORK_CLOTHING,
    HOME_OFFICE,
    EDUCATION,
    PROFESSIONAL_FEES,
    MEALS,
    GROOMING,
    GIFTS,
    INVESTMENTS,
    TAX_ACCOUNTING,
)


def is_deduction_category(category: str) -> bool:
    """Return True if category is one of the fixed ATO deduction categories."""
    return category in DEDUCTION_CATEGORIES


def resolve_category(category: str) -> str:
    """Match a user-supplied category name against the taxonomy.

    Matching ignores case and surrounding whitespace, so "home office
    expenses" resolves to "Home Office Expenses".

    Raises:
        ValidationError: If the name is not a deduction category
    """
    wanted = category.strip().lower()
    for known in DEDUCTION_CATEGORIES:
        if known.lower() == wanted:
            return known
    raise ValidationError(unknown_category(category))
