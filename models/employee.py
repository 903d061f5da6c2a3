# models/employee.py
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

class Designation(str, Enum):
    DISTRICT_OFFICER = "District Officer"
    ASSISTANT_DISTRICT_OFFICER = "Asst.District Officer"
    MANAGEMENT_SERVICE_OFFICER = "Management Service Officer"
    DEVELOPMENT_OFFICER = "Development Officer"
    EXTENSION_OFFICER = "Extension officer"
    OFFICE_EMPLOYEE_SERVICE = "Office employee service"
    GARDEN_LABOUR = "Garden labour"

class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"

class CentralProvincial(str, Enum):
    CENTRAL = "Central"
    PROVINCIAL = "Provincial"

class MaritalStatus(str, Enum):
    SINGLE = "Single"
    MARRIED = "Married"
    DIVORCED = "Divorced"
    WIDOWED = "Widowed"

class SalaryCode(str, Enum):
    M1 = "M1"
    M2 = "M2"
    M3 = "M3"
    A1 = "A1"
    A2 = "A2"
    B3 = "B3"
    C3 = "C3"
    C4 = "C4"

class Address(BaseModel):
    line1: str = ""
    line2: str = ""
    line3: str = ""

class GradeAppointmentDates(BaseModel):
    grade_iii: Optional[str] = None
    grade_ii: Optional[str] = None
    grade_i: Optional[str] = None
    grade_supra: Optional[str] = None

class EmployeeCreate(BaseModel):
    employee_number: str = Field(..., pattern=r"^[A-Z0-9]+$")
    image: Optional[str] = None  # base64 encoded
    full_name: str = Field(..., min_length=2)
    designation: Designation
    ministry: str
    gender: Gender
    personal_address: Address = Address()
    mobile_number: str
    email_address: str = Field(..., pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    nic_number: str
    date_of_birth: str  # dd-MM-yyyy
    age: int = 0
    first_appointment_date: str = ""
    grade_appointment_date: GradeAppointmentDates = GradeAppointmentDates()
    appointment_letter_no: str = ""
    increment_date: str = ""  # dd-MM
    wop_number: str = ""
    educational_qualification: str = ""
    central_provincial: CentralProvincial = CentralProvincial.CENTRAL
    date_of_arrival_vds: str = ""
    status: str = "Active"
    date_of_transfer: Optional[str] = None
    eb_pass: bool = False
    service_confirmed: bool = False
    second_language_passed: bool = False
    retired_date: Optional[str] = None  # derived from date_of_birth when omitted
    marital_status: MaritalStatus = MaritalStatus.SINGLE
    salary_code: SalaryCode

class EmployeeUpdate(EmployeeCreate):
    pass

class AgeRange(BaseModel):
    min: int
    max: int

class EmployeeFilterParams(BaseModel):
    employee_number: Optional[str] = None
    full_name: Optional[str] = None
    designation: Optional[Designation] = None
    ministry: Optional[str] = None
    nic_number: Optional[str] = None
    gender: Optional[Gender] = None
    salary_code: Optional[SalaryCode] = None
    age_range: Optional[AgeRange] = None

class PaginationParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(25, ge=1)
    sort_by: Optional[str] = None
    sort_order: int = 1  # 1 ascending, -1 descending

class EmployeeQuery(BaseModel):
    filter: Optional[EmployeeFilterParams] = None
    pagination: Optional[PaginationParams] = None
