"""Default reference data loaded by ``deductit seed``."""

from deductit.domain.categories import (
    VEHICLES,
    WORK_TOOLS,
    HOME_OFFICE,
    EDUCATION,
    PROFESSIONAL_FEES,
    MEALS,
    TAX_ACCOUNTING,
    OTHER,
)

# (code, description, ATO category, deductible, confidence)
DEFAULT_ANZSIC_MAPPINGS = [
    # Transport & vehicle
    ("4613", "Motor vehicle fuel retailing", VEHICLES, True, 90),
    ("4520", "Motor vehicle parts and accessories", VEHICLES, True, 85),
    ("4622", "Taxi and other road transport", VEHICLES, True, 85),
    ("7220", "Taxi and transport", VEHICLES, True, 85),
    # Professional services
    ("6920", "Accounting services", TAX_ACCOUNTING, True, 90),
    ("6910", "Legal services", PROFESSIONAL_FEES, True, 85),
    ("6220", "Banking", TAX_ACCOUNTING, True, 90),
    ("6221", "Bank fees and charges", TAX_ACCOUNTING, True, 95),
    # Equipment & tools
    ("7000", "Computer system design", WORK_TOOLS, True, 80),
    ("4231", "Hardware and building supplies retailing", WORK_TOOLS, True, 85),
    ("4521", "Hardware and building supplies", WORK_TOOLS, True, 85),
    ("4252", "Electronics retailing", WORK_TOOLS, True, 80),
    # Communications
    ("5910", "Telecommunications", HOME_OFFICE, True, 85),
    # Education
    ("8010", "Primary education", EDUCATION, True, 80),
    ("8020", "Secondary education", EDUCATION, True, 80),
    ("8030", "Higher education", EDUCATION, True, 85),
    # Work-related meals
    ("5611", "Takeaway food services", MEALS, True, 75),
    ("5613", "Cafes and coffee shops", MEALS, True, 70),
    ("5621", "Takeaway food services", MEALS, True, 75),
    ("4512", "Cafes and restaurants", MEALS, True, 70),
    # Personal, not deductible
    ("4110", "Supermarket and grocery stores", OTHER, False, 90),
    ("4711", "Supermarket and grocery stores", OTHER, False, 90),
    ("4251", "Department stores", OTHER, False, 85),
    ("4721", "Clothing retailing", OTHER, False, 85),
    ("9529", "Other personal services", OTHER, False, 70),
    ("9999", "General retail", OTHER, False, 30),
]

# (merchant name, display name, code, keywords, aliases)
DEFAULT_MERCHANTS = [
    ("shell", "Shell", "4613", ["shell"], ["shell coles express"]),
    ("caltex", "Caltex", "4613", ["caltex"], []),
    ("ampol", "Ampol", "4613", ["ampol"], []),
    ("7-eleven", "7-Eleven", "4613", ["7-eleven", "7eleven"], []),
    ("uber", "Uber", "7220", ["uber"], ["uber trip"]),
    ("bunnings", "Bunnings Warehouse", "4521", ["bunnings"], ["bunnings warehouse"]),
    ("officeworks", "Officeworks", "4252", ["officeworks"], []),
    ("jb hi-fi", "JB Hi-Fi", "4252", ["jbhifi"], ["jb hifi"]),
    ("telstra", "Telstra", "5910", ["telstra"], []),
    ("optus", "Optus", "5910", ["optus"], []),
    ("woolworths", "Woolworths", "4711", ["woolworths", "woolies"], []),
    ("coles", "Coles", "4711", ["coles"], []),
    ("aldi", "Aldi", "4711", ["aldi"], []),
    ("mcdonalds", "McDonald's", "5621", ["mcdonalds", "maccas"], ["mcdonald's"]),
    ("kmart", "Kmart", "4721", ["kmart"], []),
]
