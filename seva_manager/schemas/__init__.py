from .common import ErrorResponse
from .profile import (
    Profile, ProfileEnsureRequest, ProfileEnsureResponse, ProfileWithCapabilities,
    SetAdminRequest, SetAdminResponse, ReferralList,
)
from .seva import Seva, SevaCreate, SevaUpdate, SevaWithStats
from .donor import Donor, DonorCreate, DonorUpdate, DonorWithOwner
from .payment import PaymentCreate, PaymentHistory, PaymentReceipt, PaymentHistoryList
from .reports import (
    DonorLedgerRow, PaymentLedgerRow, RevenueReport, DashboardStats, UserActivity,
    SevaRevenue, PaymentModeRevenue, StatusSummary, DailyRevenue,
)
