"""Sample suppliers used to seed development stores."""

from supplierguard.models.supplier import Supplier, SupplierData

SAMPLE_SUPPLIERS: list[dict] = [
    {
        "legal_name": "Acme Corporation S.A.",
        "commercial_name": "ACME Corp",
        "tax_id": "20123456789",
        "phone_number": "+51987654321",
        "email": "contacto@acmecorp.com.pe",
        "website": "https://www.acmecorp.com.pe",
        "physical_address": "Av. Javier Prado Este 5250, La Molina, Lima",
        "country": "Peru",
        "annual_revenue": 15_000_000,
    },
    {
        "legal_name": "Tech Solutions Limitada",
        "commercial_name": "TechSol",
        "tax_id": "20987654321",
        "phone_number": "+56912345678",
        "email": "info@techsol.cl",
        "website": "https://www.techsolutions.cl",
        "physical_address": "Av. Apoquindo 4800, Las Condes, Santiago",
        "country": "Chile",
        "annual_revenue": 8_500_000,
    },
    {
        "legal_name": "Global Imports S.A.S.",
        "commercial_name": "Global Imports",
        "tax_id": "20555666777",
        "phone_number": "+573001234567",
        "email": "ventas@globalimports.com.co",
        "website": "https://www.globalimports.com.co",
        "physical_address": "Carrera 7 No. 71-21, Bogota",
        "country": "Colombia",
        "annual_revenue": 12_000_000,
    },
    {
        "legal_name": "Construtora Brasil Ltda.",
        "commercial_name": "ConstraBrasil",
        "tax_id": "20111222333",
        "phone_number": "+5511987654321",
        "email": "contato@constrabrasil.com.br",
        "website": "https://www.constrabrasil.com.br",
        "physical_address": "Av. Paulista 1578, Sao Paulo",
        "country": "Brazil",
        "annual_revenue": 25_000_000,
    },
    {
        "legal_name": "Distribuidora del Sur S.R.L.",
        "commercial_name": "Distri Sur",
        "tax_id": "20444555666",
        "phone_number": "+541145678901",
        "email": "info@distrisur.com.ar",
        "website": "https://www.distrisur.com.ar",
        "physical_address": "Av. Corrientes 1234, Buenos Aires",
        "country": "Argentina",
        "annual_revenue": 7_500_000,
    },
    {
        "legal_name": "Servicios Integrales del Norte S.A. de C.V.",
        "commercial_name": "ServNorte",
        "tax_id": "20777888999",
        "phone_number": "+525512345678",
        "email": "contacto@servnorte.mx",
        "website": None,
        "physical_address": "Av. Insurgentes Sur 1458, Ciudad de Mexico",
        "country": "Mexico",
        "annual_revenue": 3_200_000,
    },
    {
        "legal_name": "InnovateTech Inc.",
        "commercial_name": "InnovateTech",
        "tax_id": "20321654987",
        "phone_number": "+14155551234",
        "email": "hello@innovatetech.io",
        "website": "https://www.innovatetech.io",
        "physical_address": "123 Market Street, San Francisco, CA 94103",
        "country": "United States",
        "annual_revenue": 5_000_000,
    },
    {
        "legal_name": "Suministros Ibericos S.L.",
        "commercial_name": "SumIber",
        "tax_id": "20159753864",
        "phone_number": "+34912345678",
        "email": "ventas@sumiber.es",
        "website": "https://www.suministrosibericos.es",
        "physical_address": "Calle Gran Via 28, Madrid",
        "country": "Spain",
        "annual_revenue": 9_800_000,
    },
    {
        "legal_name": "Deutsche Logistik GmbH",
        "commercial_name": "DeutLog",
        "tax_id": "20852963741",
        "phone_number": "+4930123456789",
        "email": "info@deutschelogistik.de",
        "website": "https://www.deutschelogistik.de",
        "physical_address": "Friedrichstrasse 95, Berlin",
        "country": "Germany",
        "annual_revenue": 18_000_000,
    },
    {
        "legal_name": "Maple Consulting Corp.",
        "commercial_name": "MapleConsult",
        "tax_id": "20753951846",
        "phone_number": "+14165551234",
        "email": "contact@mapleconsulting.ca",
        "website": "https://www.mapleconsulting.ca",
        "physical_address": "100 King Street West, Toronto, ON M5X 1A9",
        "country": "Canada",
        "annual_revenue": 6_500_000,
    },
    {
        "legal_name": "Comercial Andina Cia. Ltda.",
        "commercial_name": "Comercial Andina",
        "tax_id": "20147258369",
        "phone_number": "+593987654321",
        "email": "ventas@comercialandina.ec",
        "website": None,
        "physical_address": "Av. 10 de Agosto N39-61, Quito",
        "country": "Ecuador",
        "annual_revenue": 850_000,
    },
    {
        "legal_name": "Mega Distribuciones S.A.",
        "commercial_name": "MegaDist",
        "tax_id": "20369258147",
        "phone_number": "+59899123456",
        "email": "info@megadist.com.uy",
        "website": "https://www.megadistribuciones.com.uy",
        "physical_address": "Av. 18 de Julio 1234, Montevideo",
        "country": "Uruguay",
        "annual_revenue": 45_000_000,
    },
]


def sample_suppliers() -> list[Supplier]:
    """Fresh ``Supplier`` instances (new ids) built from the sample data."""
    return [Supplier.create(SupplierData(**fields)) for fields in SAMPLE_SUPPLIERS]
