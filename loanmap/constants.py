# loanmap/constants.py
"""
LoanMap Constants and Configuration
Region lookup table, colour settings, playback timings and page text.
"""

# State name -> code and 2010 Census population.
# Territories without a population entry are rendered as "no data".
US_STATES = {
    'Alabama': {'abbr': 'AL', 'pop': 4780131},
    'Alaska': {'abbr': 'AK', 'pop': 710249},
    'American Samoa': {'abbr': 'AS'},
    'Arizona': {'abbr': 'AZ', 'pop': 6392301},
    'Arkansas': {'abbr': 'AR', 'pop': 2916025},
    'California': {'abbr': 'CA', 'pop': 37254522},
    'Colorado': {'abbr': 'CO', 'pop': 5029324},
    'Connecticut': {'abbr': 'CT', 'pop': 3574114},
    'Delaware': {'abbr': 'DE', 'pop': 897936},
    'District of Columbia': {'abbr': 'DC', 'pop': 601766},
    'Federated States Of Micronesia': {'abbr': 'FM'},
    'Florida': {'abbr': 'FL', 'pop': 18804592},
    'Georgia': {'abbr': 'GA', 'pop': 9688680},
    'Guam': {'abbr': 'GU'},
    'Hawaii': {'abbr': 'HI', 'pop': 1360301},
    'Idaho': {'abbr': 'ID', 'pop': 1567650},
    'Illinois': {'abbr': 'IL', 'pop': 12831574},
    'Indiana': {'abbr': 'IN', 'pop': 6484136},
    'Iowa': {'abbr': 'IA', 'pop': 3046869},
    'Kansas': {'abbr': 'KS', 'pop': 2853129},
    'Kentucky': {'abbr': 'KY', 'pop': 4339344},
    'Louisiana': {'abbr': 'LA', 'pop': 4533479},
    'Maine': {'abbr': 'ME', 'pop': 1328364},
    'Marshall Islands': {'abbr': 'MH'},
    'Maryland': {'abbr': 'MD', 'pop': 5773786},
    'Massachusetts': {'abbr': 'MA', 'pop': 6547813},
    'Michigan': {'abbr': 'MI', 'pop': 9884129},
    'Minnesota': {'abbr': 'MN', 'pop': 5303924},
    'Mississippi': {'abbr': 'MS', 'pop': 2968103},
    'Missouri': {'abbr': 'MO', 'pop': 5988928},
    'Montana': {'abbr': 'MT', 'pop': 989414},
    'Nebraska': {'abbr': 'NE', 'pop': 1826334},
    'Nevada': {'abbr': 'NV', 'pop': 2700691},
    'New Hampshire': {'abbr': 'NH', 'pop': 1316461},
    'New Jersey': {'abbr': 'NJ', 'pop': 8791953},
    'New Mexico': {'abbr': 'NM', 'pop': 2059198},
    'New York': {'abbr': 'NY', 'pop': 19378110},
    'North Carolina': {'abbr': 'NC', 'pop': 9535688},
    'North Dakota': {'abbr': 'ND', 'pop': 672591},
    'Northern Mariana Islands': {'abbr': 'MP'},
    'Ohio': {'abbr': 'OH', 'pop': 11536727},
    'Oklahoma': {'abbr': 'OK', 'pop': 3751615},
    'Oregon': {'abbr': 'OR', 'pop': 3831072},
    'Palau': {'abbr': 'PW'},
    'Pennsylvania': {'abbr': 'PA', 'pop': 12702857},
    'Puerto Rico': {'abbr': 'PR', 'pop': 3726157},
    'Rhode Island': {'abbr': 'RI', 'pop': 1052940},
    'South Carolina': {'abbr': 'SC', 'pop': 4625410},
    'South Dakota': {'abbr': 'SD', 'pop': 814195},
    'Tennessee': {'abbr': 'TN', 'pop': 6346298},
    'Texas': {'abbr': 'TX', 'pop': 25146100},
    'Utah': {'abbr': 'UT', 'pop': 2763888},
    'Vermont': {'abbr': 'VT', 'pop': 625741},
    'Virgin Islands': {'abbr': 'VI'},
    'Virginia': {'abbr': 'VA', 'pop': 8001041},
    'Washington': {'abbr': 'WA', 'pop': 6724545},
    'West Virginia': {'abbr': 'WV', 'pop': 1853011},
    'Wisconsin': {'abbr': 'WI', 'pop': 5687289},
    'Wyoming': {'abbr': 'WY', 'pop': 563767},
}

# Colour settings
COLOR_MAP_NAME = "YlGn"
NO_DATA_COLOR = "#E8E8E8"  # light grey, rgb(232,232,232)
STROKE_COLOR = "black"
STROKE_WIDTH = 0.5
LEGEND_CAPTION = "Loan Dollars / Person"
# Fractions of the domain max used as legend thresholds (1/6 is not shown)
LEGEND_FRACTIONS = (2, 3, 4, 5, 6)
LEGEND_DIVISOR = 6

# Playback
ANIMATION_YEARS = list(range(2007, 2014))  # 2007 ... 2013
SLIDER_MIN_YEAR = 2006
SLIDER_MAX_YEAR = 2013
SLIDER_START_YEAR = 2013
TICK_SECONDS = 1.2
PAUSE_SECONDS = 2.0

# Loading
EXCLUDED_YEARS = (2014,)  # partial year in the Prosper export
RECORD_COLUMNS = {
    "date": "LoanOriginationDate",
    "region": "BorrowerState",
    "amount": "LoanOriginalAmount",
}
BOUNDARY_NAME_COL = "name"
DEFAULT_RECORDS_PATH = "data/prosperLoanData.csv"
DEFAULT_GEO_PATH = "data/us_states.json"

# Environment overrides (read by the UI at start-up)
ENV_RECORDS_PATH = "LOANMAP_RECORDS_PATH"
ENV_GEO_PATH = "LOANMAP_GEO_PATH"
ENV_TICK_SECONDS = "LOANMAP_TICK_SECONDS"
ENV_PAUSE_SECONDS = "LOANMAP_PAUSE_SECONDS"

# Map figure
MAP_CONFIG = {
    "crs": "EPSG:5070",  # CONUS Albers equal-area
    "figsize": (12, 6),
    "dpi": 100,
}

# Page text
PAGE_TITLE = "Prosper Loan Density by State from 2006 - 2013"
SUMMARY_TITLE = "Observations"
SUMMARY_TEXT = (
    "Prosper is a peer-to-peer lender and the dataset used includes 113,937 loans "
    "with 81 variables (such as loan amount, borrower rate, borrower state) for each "
    "loan. I choose to investigate the progression of loan amount by state to get a "
    "picture of where the highest loan density occurs. Once I plotted overall loan "
    "density, I included a time component to show the geographic fluctuations in "
    "lendees. What I discovered was that the loan density traces the story of Prosper "
    "and the US economy as a whole; loan density starts out strongest on the West "
    "Coast (where Prosper was founded in 2005), then follows the movement of the US "
    "economy (with dips in 2008 - 2009)."
)

# Column name mapping: programmatic -> user-friendly
COLUMN_NAMES = {
    'year': 'Year',
    'region': 'State',
    'total_amount': 'Total Loan Amount ($)',
    'population': 'Population (people)',
    'normalized_total': 'Loan Dollars / Person',
}
