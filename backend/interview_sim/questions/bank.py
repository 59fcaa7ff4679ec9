import random

from interview_sim.questions.models import Question


# ---------- CURATED PER-SKILL QUESTIONS ----------

SKILL_BANK = {
    "React": [
        {
            "question": "Explain the concept of React hooks and how they improve functional components.",
            "expectedTopics": ["useState", "useEffect", "Custom hooks", "Rules of hooks"],
            "keyPhrases": ["state management", "side effects", "functional", "lifecycle", "dependencies"],
        },
        {
            "question": "How does React's Virtual DOM work and what are its benefits?",
            "expectedTopics": ["Reconciliation", "Diffing algorithm", "Performance optimization", "Batched updates"],
            "keyPhrases": ["render", "dom", "diff", "update", "performance", "batch"],
        },
        {
            "question": "Describe the component lifecycle in React and how it differs between class and functional components.",
            "expectedTopics": ["Mounting", "Updating", "Unmounting", "useEffect", "componentDidMount"],
            "keyPhrases": ["lifecycle", "mount", "update", "unmount", "effect", "cleanup"],
        },
    ],
    "JavaScript": [
        {
            "question": "Explain closures in JavaScript and provide a practical example.",
            "expectedTopics": ["Lexical scoping", "Memory management", "Data privacy", "Factory functions"],
            "keyPhrases": ["scope", "function", "variable", "access", "private", "encapsulation"],
        },
        {
            "question": "What are Promises in JavaScript and how do they help with asynchronous operations?",
            "expectedTopics": ["async/await", "then/catch", "Error handling", "Promise chaining"],
            "keyPhrases": ["asynchronous", "then", "catch", "await", "resolve", "reject", "chain"],
        },
        {
            "question": "Describe the event loop in JavaScript and how it handles asynchronous code.",
            "expectedTopics": ["Call stack", "Callback queue", "Microtasks", "Macrotasks", "Single-threaded"],
            "keyPhrases": ["stack", "queue", "async", "setTimeout", "callback", "non-blocking"],
        },
    ],
    "TypeScript": [
        {
            "question": "What are the benefits of using TypeScript over JavaScript? Provide specific examples.",
            "expectedTopics": ["Static typing", "Type inference", "Interfaces", "Generics", "IDE support"],
            "keyPhrases": ["type", "interface", "compile-time", "error", "generics", "autocomplete"],
        },
        {
            "question": "Explain TypeScript's generics with a practical example.",
            "expectedTopics": ["Type parameters", "Reusable components", "Type constraints", "Generic interfaces"],
            "keyPhrases": ["generic", "<T>", "constraint", "extends", "flexibility", "type parameter"],
        },
    ],
    "Node.js": [
        {
            "question": "Explain Node.js event-driven architecture. How does it handle concurrency?",
            "expectedTopics": ["Event loop", "Non-blocking I/O", "Thread pool", "Libuv"],
            "keyPhrases": ["event loop", "async", "callback", "non-blocking", "concurrency", "single thread"],
        },
        {
            "question": "What are streams in Node.js and why are they important?",
            "expectedTopics": ["Buffering", "Memory efficiency", "Pipeline", "Types of streams"],
            "keyPhrases": ["readable", "writable", "transform", "chunk", "pipe", "memory", "buffer"],
        },
    ],
}


def skill_template_questions(skills: list[str]) -> list[dict]:
    joined = ", ".join(skills)
    first = skills[0] if skills else "your main stack"
    return [
        {
            "question": f"Explain your experience with {joined} and how you've applied these skills in previous projects.",
            "expectedTopics": ["Project examples", "Technical implementation", "Challenges faced", "Solutions"],
            "keyPhrases": ["project", "implement", "challenge", "solution", "experience", "application"],
        },
        {
            "question": f"What are the latest developments or trends in {joined} that you find most interesting?",
            "expectedTopics": ["Current trends", "New features", "Recent updates", "Industry direction"],
            "keyPhrases": ["trend", "new", "recent", "update", "feature", "future", "direction"],
        },
        {
            "question": f"Describe a time when you had to debug a complex issue involving {first}. What was your approach?",
            "expectedTopics": ["Problem identification", "Debugging tools", "Root cause analysis", "Resolution steps"],
            "keyPhrases": ["debug", "issue", "problem", "analyze", "fix", "solution", "approach"],
        },
        {
            "question": f"How do you stay updated with the latest developments in {joined}?",
            "expectedTopics": ["Learning resources", "Community engagement", "Documentation", "Practice projects"],
            "keyPhrases": ["learn", "resources", "community", "practice", "documentation", "update", "study"],
        },
        {
            "question": f"What performance optimization techniques do you apply when working with {joined}?",
            "expectedTopics": ["Performance metrics", "Bottlenecks", "Optimization strategies", "Measurement tools"],
            "keyPhrases": ["performance", "optimization", "speed", "bottleneck", "measure", "improve", "metrics"],
        },
        {
            "question": f"How do you approach writing maintainable and scalable code when using {joined}?",
            "expectedTopics": ["Code organization", "Design patterns", "Documentation", "Testing strategies"],
            "keyPhrases": ["maintainable", "scalable", "organization", "structure", "pattern", "clean", "architecture"],
        },
    ]


def generic_question(skill: str) -> dict:
    return {
        "question": f"Tell me about a challenging problem you solved using {skill}?",
        "expectedTopics": ["Problem description", "Solution approach", "Technologies used", "Outcome"],
        "keyPhrases": ["problem", "challenge", "solution", "approach", "result", "outcome"],
    }


# ---------- FIXED FALLBACK SET ----------

DEFAULT_QUESTIONS = [
    {
        "question": "Can you explain the difference between useState and useRef hooks in React?",
        "expectedTopics": [
            "State updates trigger re-renders",
            "Refs don't cause re-renders",
            "Persistence across renders",
            "DOM element access",
        ],
        "keyPhrases": ["useState", "useRef", "re-render", "state", "reference", "DOM", "update"],
    },
    {
        "question": "How would you optimize performance in a React application that renders a large list of items?",
        "expectedTopics": ["Virtualization", "Pagination", "Memoization", "PureComponent/React.memo", "Keys"],
        "keyPhrases": ["virtualization", "pagination", "memo", "useMemo", "key", "performance", "list", "rendering"],
    },
    {
        "question": "Describe your approach to testing React components. What tools and methodologies do you use?",
        "expectedTopics": ["Jest", "React Testing Library", "Unit tests", "Integration tests", "E2E tests", "Mocking"],
        "keyPhrases": [
            "jest", "testing library", "unit test", "integration test", "e2e", "end-to-end", "mock", "snapshot",
        ],
    },
    {
        "question": "Can you explain how you would implement client-side form validation in React?",
        "expectedTopics": [
            "FormData API", "Controlled components", "Form libraries", "Custom validation", "Error handling",
        ],
        "keyPhrases": [
            "form", "validation", "formik", "react-hook-form", "controlled component", "error", "validate", "schema",
        ],
    },
    {
        "question": "What is the context API in React and when would you use it instead of props or state management libraries?",
        "expectedTopics": ["Context Provider", "Context Consumer", "useContext hook", "Global state", "Prop drilling"],
        "keyPhrases": [
            "context", "provider", "consumer", "useContext", "global state", "prop drilling", "nesting",
        ],
    },
    {
        "question": "Explain the differences between useEffect, useMemo, and useCallback in React hooks.",
        "expectedTopics": [
            "Side effects", "Memoization", "Dependency arrays", "Performance optimization", "Referential equality",
        ],
        "keyPhrases": [
            "useEffect", "useMemo", "useCallback", "dependency array", "memoization", "performance", "side effect",
        ],
    },
    {
        "question": "What are the key differences between server-side rendering (SSR) and client-side rendering (CSR) in React applications?",
        "expectedTopics": [
            "Initial load time", "SEO benefits", "Hydration", "Next.js", "Frameworks comparison",
            "First contentful paint",
        ],
        "keyPhrases": [
            "SSR", "CSR", "server-side", "client-side", "rendering", "SEO", "hydration", "Next.js", "performance",
        ],
    },
    {
        "question": "How would you handle global state management in a large React application?",
        "expectedTopics": [
            "Redux", "Context API", "Zustand", "Jotai", "State organization", "Performance considerations",
        ],
        "keyPhrases": [
            "Redux", "Context", "global state", "store", "state management", "actions", "reducers", "selectors",
        ],
    },
    {
        "question": "Describe how you would implement error boundaries in a React application.",
        "expectedTopics": ["Error catching", "componentDidCatch", "Fallback UI", "Class components", "Error logging"],
        "keyPhrases": [
            "error boundary", "componentDidCatch", "getDerivedStateFromError", "fallback", "error handling",
            "crash", "recovery",
        ],
    },
    {
        "question": "What are React portals and when would you use them in an application?",
        "expectedTopics": ["Modal dialogs", "Tooltips", "DOM hierarchy", "Event bubbling", "ReactDOM.createPortal"],
        "keyPhrases": ["portal", "createPortal", "DOM", "modal", "tooltip", "accessibility", "events", "parent"],
    },
]


def default_questions(count: int) -> list[Question]:
    """Fixed fallback set, truncated or cycled to exactly `count` questions."""
    total = max(1, int(count or 1))
    picked = []
    for index in range(total):
        data = DEFAULT_QUESTIONS[index % len(DEFAULT_QUESTIONS)]
        picked.append(Question.from_dict(data, default_id=index + 1).with_id(index + 1))
    return picked


def questions_for_skills(skills: list[str], count: int, rng: random.Random | None = None) -> list[Question]:
    """
    One random curated question per known skill, padded with
    skill-templated questions, then generic ones; shuffled and cut to count.
    """
    rng = rng or random.Random()
    skills = [str(s).strip() for s in (skills or []) if str(s or "").strip()] or ["software engineering"]
    total = max(1, int(count or 1))

    selected: list[dict] = []
    for skill in skills:
        options = SKILL_BANK.get(skill)
        if options:
            selected.append(rng.choice(options))

    templated = skill_template_questions(skills)
    while len(selected) < total:
        if templated:
            selected.append(templated.pop(0))
        else:
            selected.append(generic_question(skills[len(selected) % len(skills)]))

    selected = selected[:total]
    rng.shuffle(selected)
    return [Question.from_dict(data).with_id(index + 1) for index, data in enumerate(selected)]
