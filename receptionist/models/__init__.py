"""
Models module for data structures and state management in the voice receptionist.

Key components:
- business: Immutable business context (persona, services, opening hours) that
  parameterizes the agent's behavior for one business.
- appointments: Appointment records kept by the booking repository.
- conversation: Conversation status, transcript entries, tool invocations and
  results, and the read-only view exposed to the UI.
- realtime_schemas: Session configuration, credential grant and client event
  builders for the OpenAI Realtime API.
- api_schemas: Request and response bodies of the backend HTTP endpoints.

Usage examples:
```python
from receptionist.config.businesses import get_business
from receptionist.models import ConversationStatus, ToolInvocation

business = get_business("barber")
print(business.agentPersona.greeting)

invocation = ToolInvocation(
    callId="call_123",
    name="check_availability",
    argumentsJson='{"date": "2024-06-10"}',
)
print(invocation.arguments()["date"])
```
"""

from receptionist.models.appointments import Appointment, AppointmentStatus
from receptionist.models.business import AgentPersona, BusinessContext, DayHours, Service
from receptionist.models.conversation import (
    ConversationStatus,
    ConversationView,
    Speaker,
    ToolInvocation,
    ToolResult,
    TranscriptEntry,
)
from receptionist.models.realtime_schemas import (
    BusinessSummary,
    ClientSecret,
    CredentialGrant,
    SessionConfig,
    ToolSchema,
    TurnDetection,
)
from receptionist.models.api_schemas import FunctionRequest, SessionRequest
