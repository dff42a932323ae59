# speech_practice/models/catalog.py - Built-in practice content

DEFAULT_CATEGORIES = [
    {
        "id": "interview",
        "name": "Interview Practice",
        "description": "Common interview questions and scenarios",
        "icon": "🎯",
    },
    {
        "id": "elevator-pitch",
        "name": "Elevator Pitch",
        "description": "Perfect your 30-second introduction",
        "icon": "🚀",
    },
    {
        "id": "presentation",
        "name": "Presentation Skills",
        "description": "Public speaking and presentation practice",
        "icon": "🎤",
    },
    {
        "id": "networking",
        "name": "Networking",
        "description": "Conversation starters and networking tips",
        "icon": "🤝",
    },
]

# Durations are in seconds
DEFAULT_QUESTIONS = {
    "interview": [
        {
            "id": "tell-me-about-yourself",
            "question": "Tell me about yourself",
            "audioUrl": "/audio/interview/tell-me-about-yourself.mp3",
            "duration": 120,
            "tips": "Focus on relevant experience and achievements",
        },
        {
            "id": "why-should-we-hire-you",
            "question": "Why should we hire you?",
            "audioUrl": "/audio/interview/why-should-we-hire-you.mp3",
            "duration": 90,
            "tips": "Highlight unique value and specific examples",
        },
        {
            "id": "biggest-weakness",
            "question": "What is your biggest weakness?",
            "audioUrl": "/audio/interview/biggest-weakness.mp3",
            "duration": 90,
            "tips": "Show self-awareness and growth mindset",
        },
        {
            "id": "where-do-you-see-yourself",
            "question": "Where do you see yourself in 5 years?",
            "audioUrl": "/audio/interview/where-do-you-see-yourself.mp3",
            "duration": 90,
            "tips": "Align with company goals and show ambition",
        },
    ],
    "elevator-pitch": [
        {
            "id": "personal-intro",
            "question": "Introduce yourself professionally",
            "audioUrl": "/audio/elevator-pitch/personal-intro.mp3",
            "duration": 30,
            "tips": "Include name, role, and key value proposition",
        },
        {
            "id": "value-proposition",
            "question": "What value do you bring?",
            "audioUrl": "/audio/elevator-pitch/value-proposition.mp3",
            "duration": 30,
            "tips": "Focus on benefits, not just features",
        },
        {
            "id": "call-to-action",
            "question": "End with a clear call to action",
            "audioUrl": "/audio/elevator-pitch/call-to-action.mp3",
            "duration": 30,
            "tips": "Make it easy for them to take next step",
        },
    ],
    "presentation": [
        {
            "id": "opening-hook",
            "question": "Start with an engaging opening",
            "audioUrl": "/audio/presentation/opening-hook.mp3",
            "duration": 60,
            "tips": "Use a story, question, or surprising fact",
        },
        {
            "id": "key-points",
            "question": "Present your main points clearly",
            "audioUrl": "/audio/presentation/key-points.mp3",
            "duration": 120,
            "tips": "Use clear structure and transitions",
        },
        {
            "id": "strong-closing",
            "question": "End with impact",
            "audioUrl": "/audio/presentation/strong-closing.mp3",
            "duration": 60,
            "tips": "Summarize key takeaways and next steps",
        },
    ],
    "networking": [
        {
            "id": "ice-breaker",
            "question": "Break the ice naturally",
            "audioUrl": "/audio/networking/ice-breaker.mp3",
            "duration": 60,
            "tips": "Find common ground or ask about their work",
        },
        {
            "id": "show-interest",
            "question": "Show genuine interest in their work",
            "audioUrl": "/audio/networking/show-interest.mp3",
            "duration": 90,
            "tips": "Ask thoughtful questions about their role",
        },
        {
            "id": "share-value",
            "question": "Share how you can help them",
            "audioUrl": "/audio/networking/share-value.mp3",
            "duration": 90,
            "tips": "Offer specific ways you can be valuable",
        },
    ],
}

DEFAULT_TOPICS = [
    {
        "id": "job-interview",
        "title": "Mock Job Interview",
        "description": "Answer common interview questions from an AI hiring manager",
        "difficulty": "intermediate",
        "category": "interview",
        "prompt": "You are a friendly but thorough hiring manager interviewing the user for a role they choose. "
                  "Ask one question at a time and follow up on vague answers.",
        "openingLine": "Thanks for coming in today. Which role are you interviewing for?",
    },
    {
        "id": "coffee-chat",
        "title": "Networking Coffee Chat",
        "description": "Practice small talk and building rapport with a new contact",
        "difficulty": "beginner",
        "category": "networking",
        "prompt": "You are a professional meeting the user at an industry event. Keep the conversation light, "
                  "share a little about your own work, and give the user room to ask questions.",
        "openingLine": "Hi there! I don't think we've met yet. What brings you to the event?",
    },
    {
        "id": "pitch-feedback",
        "title": "Pitch to an Investor",
        "description": "Deliver your elevator pitch and handle tough follow-up questions",
        "difficulty": "advanced",
        "category": "elevator-pitch",
        "prompt": "You are a busy investor with limited time. Let the user pitch, then challenge their "
                  "assumptions with pointed but fair questions.",
        "openingLine": "I have a few minutes before my next meeting. What are you working on?",
    },
    {
        "id": "presentation-qa",
        "title": "Presentation Q&A",
        "description": "Handle audience questions after a talk",
        "difficulty": "intermediate",
        "category": "presentation",
        "prompt": "You are an audience member after the user's presentation. Ask them to summarize their talk, "
                  "then ask clarifying and skeptical questions about it.",
        "openingLine": "Great talk! Could you remind me of your main point before I ask my question?",
    },
    {
        "id": "casual-conversation",
        "title": "Everyday Conversation",
        "description": "Relaxed conversation to build fluency and reduce filler words",
        "difficulty": "beginner",
        "category": "general",
        "prompt": "You are a curious, upbeat conversation partner. Talk about everyday topics such as hobbies, "
                  "travel and food, and encourage the user to speak in full sentences.",
        "openingLine": "Hey! How has your week been so far?",
    },
]
