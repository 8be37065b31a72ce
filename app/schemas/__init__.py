from .order import OrderCreate, OrderResponse, AvailableOrder, OrderStatusUpdate
from .store import StoreCreate, StoreResponse, StoreServiceCreate, StoreServiceResponse, NearbyStore
from .user import UserSignup, UserSignIn, StoreLogin, AdminLogin, TokenResponse
from .delivery_partner import DeliveryPartnerRegister, DeliveryPartnerCreate, DeliveryPartnerResponse
from .promotion import PromotionCreate, PromotionApply, PromotionResponse
