"""Profile endpoints: sign-up, sign-in, guest access and known-user lookup."""

from fastapi import APIRouter, Depends, status

from context.profile_directory import ProfileDirectory
from models.focus_types import UserRole
from server.dependencies import get_api_key, get_profile_directory
from server.schemas.requests import GuestRequest, SignInRequest, SignUpRequest
from server.schemas.responses import ProfileDTO, ProfileLookupDTO

router = APIRouter(prefix="/v1/profiles", tags=["Profiles"])


@router.post("", response_model=ProfileDTO, status_code=status.HTTP_201_CREATED)
async def sign_up(
    request: SignUpRequest,
    directory: ProfileDirectory = Depends(get_profile_directory),
    api_key: str = Depends(get_api_key),
):
    user = directory.register(
        email=request.email,
        name=request.name,
        role=UserRole.parse(request.role),
        password=request.password,
        confirm_password=request.confirm_password,
    )
    return ProfileDTO.from_user_context(user)


@router.post("/sign-in", response_model=ProfileDTO)
async def sign_in(
    request: SignInRequest,
    directory: ProfileDirectory = Depends(get_profile_directory),
    api_key: str = Depends(get_api_key),
):
    return ProfileDTO.from_user_context(directory.sign_in(request.email, request.password))


@router.post("/guest", response_model=ProfileDTO, status_code=status.HTTP_201_CREATED)
async def guest(
    request: GuestRequest,
    directory: ProfileDirectory = Depends(get_profile_directory),
    api_key: str = Depends(get_api_key),
):
    user = directory.guest(UserRole.parse(request.role), passcode=request.passcode)
    return ProfileDTO.from_user_context(user)


@router.get("/lookup", response_model=ProfileLookupDTO)
async def lookup(
    email: str,
    directory: ProfileDirectory = Depends(get_profile_directory),
    api_key: str = Depends(get_api_key),
):
    """Known-user detection: tells the sign-in form whether to switch to sign-in mode."""
    profile = directory.lookup(email)
    if profile is None or profile.is_guest:
        return ProfileLookupDTO(known=False)
    return ProfileLookupDTO(known=True, role=profile.role.value)
