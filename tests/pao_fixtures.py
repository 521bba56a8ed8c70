"""Trimmed copies of Manatee PAO markup used across the tests."""

PARCEL_ID = "1234567890"
DETAIL_URL = f"https://www.manateepao.gov/parcel/?parid={PARCEL_ID}"
SEARCH_URL = "https://www.manateepao.gov/search/"
RESULTS_URL = "https://www.manateepao.gov/search/?results=1"

OWNER_CARD = """
<div class="card-body owner-content">
  <div class="row"><div class="col-sm-3 font-weight-bold">Ownership:</div><div class="col-sm-9">SMITH JOHN;SMITH JANE</div></div>
  <div class="row"><div class="col-sm-3 font-weight-bold">Owner Type:</div><div class="col-sm-9">Individual</div></div>
  <div class="row"><div class="col-sm-3 font-weight-bold">Situs Address:</div><div class="col-sm-9">4659 56TH TER E, BRADENTON FL 34208</div></div>
  <div class="row"><div class="col-sm-3 font-weight-bold">Land Use:</div><div class="col-sm-9">0100 - SINGLE FAMILY RESIDENTIAL</div></div>
  <div class="row"><div class="col-sm-3 font-weight-bold">Land Size:</div><div class="col-sm-9">0.2500 Acres / 10,890 SqFt</div></div>
  <div class="row"><div class="col-sm-3 font-weight-bold">Building Area:</div><div class="col-sm-9">2,145 SqFt Under Roof / 1,650 SqFt Living</div></div>
  <div class="row"><div class="col-sm-3 font-weight-bold">Subdivision:</div><div class="col-sm-9">CREEKWOOD PH ONE</div></div>
</div>
"""

VALUES_TABLE = """
<table id="tableValue" class="table">
  <thead><tr>
    <th>Year</th><th>Homestead</th><th>Land</th><th>Improvements</th><th>Just/Market</th>
    <th>Non-School Assessed</th><th>School Assessed</th><th>County Taxable</th><th>School Taxable</th>
    <th>Municipality Taxable</th><th>Ind Spc Dist Taxable</th><th>Ad Valorem Taxes</th><th>Non-Ad Valorem Taxes</th>
  </tr></thead>
  <tbody>
    <tr><td>2023</td><td>Yes</td><td>$90,000</td><td>$300,000</td><td>$390,000</td><td>$289,500</td><td>$300,000</td>
        <td>$239,500</td><td>$264,500</td><td>$0</td><td>$239,500</td><td>$4,301.10</td><td>$598.20</td></tr>
    <tr><td>2024</td><td>Yes</td><td>$95,000</td><td>$310,500</td><td>$405,500</td><td>$298,200</td><td>$310,000</td>
        <td>$248,200</td><td>$273,200</td><td>$0</td><td>$248,200</td><td>$4,512.33</td><td>$612.40</td></tr>
  </tbody>
</table>
"""

SALES_TABLE = """
<table id="tableSales" class="table">
  <thead><tr><th>Sale Date</th><th>Book/Page</th><th>Instrument Type</th><th>V/I</th><th>Qual Code</th><th>Sale Price</th><th>Grantee</th></tr></thead>
  <tbody>
    <tr><td>03/02/2015</td><td>2561/4410</td><td>WD</td><td>I</td><td>01</td><td>$245,000</td><td>DOE JANE</td></tr>
    <tr><td>01/10/2022</td><td>2901/0033</td><td>QC</td><td>I</td><td>11</td><td>$0</td><td>SMITH JOHN</td></tr>
    <tr><td>06/15/2021</td><td>2876/1123</td><td>WD</td><td>I</td><td>01</td><td>$385,000</td><td>SMITH JOHN</td></tr>
  </tbody>
</table>
"""

LAND_PANE = """
<div id="land" class="tab-pane">
  <table class="table">
    <thead><tr><th>Land Use</th><th>Land Size</th><th>Road Surface</th><th>Frontage</th><th>Depth</th></tr></thead>
    <tbody><tr><td>0100 SINGLE FAMILY</td><td>0.2500 AC</td><td>PAVED</td><td>75</td><td>145</td></tr></tbody>
  </table>
</div>
"""

BUILDINGS_PANE = """
<div id="buildings" class="tab-pane active">
  <table class="table">
    <thead><tr><th>Bldg</th><th>Year Built</th><th>Eff. Year</th><th>Living Area</th><th>Under Roof</th>
      <th>Bed/Bath/Half</th><th>Stories</th><th>Construction/Exterior</th><th>Roof Cover</th><th>Heat/Cool</th></tr></thead>
    <tbody><tr><td>1</td><td>2004</td><td>2006</td><td>1,650</td><td>2,145</td><td>3/2/1</td><td>1</td>
      <td>MASONRY/STUCCO</td><td>SHINGLE</td><td>CENTRAL/CENTRAL</td></tr></tbody>
  </table>
</div>
"""

FEATURES_PANE = """
<div id="features" class="tab-pane">
  <table class="table">
    <thead><tr><th>Description</th><th>Year</th><th>Units</th><th>Value</th></tr></thead>
    <tbody>
      <tr><td>POOL - RESIDENTIAL</td><td>2005</td><td>450 SF</td><td>$18,200</td></tr>
      <tr><td>SCREEN ENCLOSURE</td><td>2005</td><td>1</td><td>$6,100</td></tr>
    </tbody>
  </table>
</div>
"""

INSPECTIONS_PANE = """
<div id="inspections" class="tab-pane">
  <table class="table">
    <thead><tr><th>Date</th><th>Type</th><th>Result</th><th>Inspector</th></tr></thead>
    <tbody>
      <tr><td>04/12/2023</td><td>Field Review</td><td>Complete</td><td>Maria Lopez</td></tr>
      <tr><td></td><td></td><td></td><td></td></tr>
    </tbody>
  </table>
</div>
"""

SEARCH_FORM_HTML = """
<html><head><title>Property Search</title></head><body>
<form>
  <input id="OwnLast"><input id="OwnFirst"><input id="ParcelId">
  <input id="Address"><input id="Zip">
  <input type="submit" class="btn btn-success" value="Search">
</form>
</body></html>
"""

RESULTS_HTML = """
<html><body>
<table class="table">
  <thead><tr><th>Parcel</th><th>Owner</th><th>Address</th></tr></thead>
  <tbody>
    <tr><td><a href="/parcel/?parid=5555555555">5555555555</a></td><td>JONES BOB</td><td>4661 56TH TER E BRADENTON</td></tr>
    <tr><td><a href="/parcel/?parid=1234567890">1234567890</a></td><td>SMITH JOHN</td><td>4659 56TH TERRACE E BRADENTON</td></tr>
  </tbody>
</table>
</body></html>
"""

NO_RESULTS_HTML = """
<html><body><div class="alert alert-info">No records found matching your search criteria.</div></body></html>
"""

CAPTCHA_HTML = """
<html><body><div class="g-recaptcha" data-sitekey="x"></div><p>Please verify you are human.</p></body></html>
"""


def detail_page_html(owner_card: str = OWNER_CARD) -> str:
    return f"""
<html><body>
<div id="property-card">{owner_card}</div>
<ul class="nav nav-tabs">
  <li><a class="nav-link active" href="#values">Values</a></li>
  <li><a class="nav-link" href="#land">Land</a></li>
  <li><a class="nav-link active" href="#buildings">Buildings</a></li>
  <li><a class="nav-link" href="#inspections">Inspections</a></li>
</ul>
{VALUES_TABLE}
{SALES_TABLE}
</body></html>
"""
