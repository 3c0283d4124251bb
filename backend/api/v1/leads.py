from fastapi import APIRouter, Depends
from api.dependencies import get_lead_service
from schemas.lead_schema import EnquiryCreate, RequirementCreate
from services.lead_service import LeadService
from utils.responses import no_store_json

router = APIRouter()

@router.post("/enquiries", status_code=201)
async def submit_enquiry(enquiry: EnquiryCreate, lead_service: LeadService = Depends(get_lead_service)):
    return no_store_json(await lead_service.submit_enquiry(enquiry), status_code=201)

@router.post("/requirements", status_code=201)
async def submit_requirement(requirement: RequirementCreate, lead_service: LeadService = Depends(get_lead_service)):
    return no_store_json(await lead_service.submit_requirement(requirement), status_code=201)
