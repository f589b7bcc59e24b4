"""
Voice Receptionist - Realtime AI receptionists for small businesses

This application provides realtime, speech-to-speech AI receptionists for
Indian small businesses such as salons, clinics, gyms, spas and electricians.
Callers talk to an agent that checks availability, books and cancels
appointments, and answers questions about the business.

Architecture Overview:
- FastAPI backend that brokers short-lived OpenAI Realtime credentials and
  executes the agent's tool calls against the appointment book
- Client-side voice session that negotiates a WebRTC (or WebSocket) transport
  with the provider and interprets its event stream
- Telegram notifications to the business owner for bookings and cancellations

Key Components:
- bot: The voice session (negotiator, event interpreter, tool dispatcher,
  transcript presenter, transports and local audio media)
- config: Constants, demo business personas, and logging setup
- handlers: Request handlers behind the backend HTTP endpoints
- models: Pydantic models for businesses, appointments, conversation state
  and provider messages
- services: Availability, booking, prompt generation, credential brokering
  and notifications

Getting Started:
1. Set up environment variables:
   - OPENAI_API_KEY: Your OpenAI API key (backend only)
   - TELEGRAM_BOT_TOKEN: Bot token for owner notifications (optional)
   - PORT: Port to run the server on (default 8000)
   - HOST: Host to bind the server to (default 0.0.0.0)
   - LOG_LEVEL: Logging level (default INFO)

2. Start the backend:
   ```bash
   python run.py
   ```

3. Talk to a receptionist from the terminal:
   ```bash
   python -m receptionist.cli --persona barber
   ```
"""
