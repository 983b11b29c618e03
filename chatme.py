# chatme.py
# Local console chat against the same command handler the webhooks use.
import config
from chat_manager import process_message
from user_store import UserStore

USER_ID = "local"


def main(data_file=None):
    store = UserStore.load(data_file or config.USER_DATA_FILE)

    print(f"Local Chat Bot started for user {USER_ID}")
    print("Type 'exit' to quit.\n")

    while True:
        try:
            user_input = input("You: ").strip()
        except EOFError:
            break
        if user_input.lower() in ["exit", "quit"]:
            print("Bot: Goodbye!")
            break

        reply = process_message(store, USER_ID, user_input)
        print(f"Bot: {reply}\n")


if __name__ == "__main__":
    main()
